"""
Money Helpers

Decimal coercion and display rounding for ledger amounts. The ledger works in
a single currency; values are held as unrounded Decimal and only rounded for
display. NEVER uses float for arithmetic.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

from .exceptions import InvalidNumericInputError

# High precision for EMI powers over long tenures
getcontext().prec = 28

ZERO = Decimal('0')

# Largest magnitude accepted from callers; keeps sums and EMI powers inside
# the Decimal exponent range
MAX_MAGNITUDE = Decimal('1e15')

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount, field_name: str = "amount") -> Decimal:
    """
    Coerce a caller-supplied number to Decimal.

    Floats go through str() so 0.1 stays 0.1. Non-finite values and values
    beyond MAX_MAGNITUDE are rejected.

    Raises:
        InvalidNumericInputError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidNumericInputError(field_name, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidNumericInputError(field_name, value, "must be a number")
    if not result.is_finite():
        raise InvalidNumericInputError(field_name, value, "must be finite")
    if abs(result) > MAX_MAGNITUDE:
        raise InvalidNumericInputError(field_name, value, "is too large")
    return result


def to_positive_decimal(value: Amount, field_name: str = "amount") -> Decimal:
    """Coerce to Decimal and require a strictly positive value"""
    result = to_decimal(value, field_name)
    if result <= ZERO:
        raise InvalidNumericInputError(field_name, value, "must be positive")
    return result


def quantize(amount: Decimal, precision: int = 2) -> Decimal:
    """Round half-up to the given number of decimal places"""
    return amount.quantize(Decimal('0.1') ** precision, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, currency_code: str = "INR", precision: int = 2) -> str:
    """Format for display, e.g. 'INR 1,234.50'"""
    return f"{currency_code} {quantize(amount, precision):,.{precision}f}"
