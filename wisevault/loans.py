"""
Loan Module

Flat-rate amortized loans. The equated monthly installment (EMI) and the
total payable are fixed when the loan is created; payments then reduce the
outstanding balance until it reaches zero.
"""

import copy
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from .exceptions import InvalidNumericInputError
from .money import Amount, ZERO, to_decimal, to_positive_decimal
from .result import ErrorType, Result

DEFAULT_ANNUAL_RATE_PERCENT = Decimal('12.0')
MONTHS_PER_YEAR = 12


def monthly_rate_for(annual_rate_percent: Decimal) -> Decimal:
    """Convert an annual percentage rate to a monthly fraction"""
    return (annual_rate_percent / Decimal(MONTHS_PER_YEAR)) / Decimal('100')


def calculate_emi(principal: Decimal, annual_rate_percent: Decimal, tenure_months: int) -> Decimal:
    """
    Equated monthly installment.

    EMI = P * r * (1 + r)^n / ((1 + r)^n - 1), with r the monthly rate and
    n the tenure in months. A 0% rate leaves the denominator at zero and is
    rejected like any other degenerate term.

    Raises:
        InvalidNumericInputError: On a zero denominator, an arithmetic
            overflow or a non-finite result
    """
    if tenure_months <= 0:
        raise InvalidNumericInputError("tenure", tenure_months, "must be at least one month")

    rate = monthly_rate_for(annual_rate_percent)
    try:
        factor = (Decimal('1') + rate) ** tenure_months
        denominator = factor - Decimal('1')
        if denominator == ZERO:
            raise InvalidNumericInputError(
                "annual_rate_percent", annual_rate_percent, "makes the EMI denominator zero"
            )
        emi = principal * rate * factor / denominator
    except ArithmeticError:
        raise InvalidNumericInputError("annual_rate_percent", annual_rate_percent,
                                       "overflows the EMI calculation")

    if not emi.is_finite():
        raise InvalidNumericInputError("annual_rate_percent", annual_rate_percent,
                                       "produces a non-finite EMI")
    return emi


@dataclass(frozen=True)
class AmortizationEntry:
    """One month of the repayment plan"""
    month: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_principal: Decimal


@dataclass(frozen=True)
class LoanPaymentOutcome:
    """What a payment did to the loan"""
    loan_id: int
    amount: Decimal
    remaining_balance: Decimal
    paid_off: bool
    recorded_account_number: Optional[int] = None  # Account whose log holds the payment


@dataclass
class Loan:
    """
    Amortized loan with terms fixed at creation.

    ``monthly_emi`` and ``outstanding_balance`` are derived in
    ``__post_init__``; afterwards only ``make_payment`` changes the balance,
    which never increases and never drops below zero.
    """
    loan_id: int
    borrower_name: str
    borrower_username: str
    principal: Decimal
    tenure_months: int
    annual_rate_percent: Decimal = DEFAULT_ANNUAL_RATE_PERCENT
    monthly_emi: Decimal = field(init=False)
    outstanding_balance: Decimal = field(init=False)

    def __post_init__(self):
        self.principal = to_positive_decimal(self.principal, "principal")
        self.annual_rate_percent = to_decimal(self.annual_rate_percent, "annual_rate_percent")
        if self.annual_rate_percent < ZERO:
            raise InvalidNumericInputError(
                "annual_rate_percent", self.annual_rate_percent, "must not be negative"
            )
        if isinstance(self.tenure_months, bool) or not isinstance(self.tenure_months, int):
            raise InvalidNumericInputError("tenure", self.tenure_months, "must be a whole number")

        self.monthly_emi = calculate_emi(self.principal, self.annual_rate_percent, self.tenure_months)
        self.outstanding_balance = self.monthly_emi * Decimal(self.tenure_months)

    @classmethod
    def originate(
        cls,
        loan_id: int,
        borrower_name: str,
        borrower_username: str,
        principal: Amount,
        tenure_years: int,
        annual_rate_percent: Amount = DEFAULT_ANNUAL_RATE_PERCENT
    ) -> 'Loan':
        """Create a loan from a tenure given in years"""
        if isinstance(tenure_years, bool) or not isinstance(tenure_years, int):
            raise InvalidNumericInputError("tenure", tenure_years, "must be a whole number of years")
        return cls(
            loan_id=loan_id,
            borrower_name=borrower_name,
            borrower_username=borrower_username,
            principal=principal,
            tenure_months=tenure_years * MONTHS_PER_YEAR,
            annual_rate_percent=annual_rate_percent
        )

    @property
    def tenure_years(self) -> Decimal:
        return Decimal(self.tenure_months) / Decimal(MONTHS_PER_YEAR)

    @property
    def monthly_rate(self) -> Decimal:
        return monthly_rate_for(self.annual_rate_percent)

    @property
    def total_payable(self) -> Decimal:
        """Total of all installments as fixed at creation"""
        return self.monthly_emi * Decimal(self.tenure_months)

    @property
    def total_interest(self) -> Decimal:
        return self.total_payable - self.principal

    @property
    def is_paid_off(self) -> bool:
        return self.outstanding_balance == ZERO

    def make_payment(self, amount: Amount) -> Result[LoanPaymentOutcome]:
        """
        Apply a payment.

        A payment at or above the outstanding balance clears it to exactly
        zero; any excess is not carried anywhere.
        """
        try:
            value = to_positive_decimal(amount)
        except InvalidNumericInputError as e:
            return Result.fail(e.message, ErrorType.INVALID_NUMERIC_INPUT)

        if value >= self.outstanding_balance:
            self.outstanding_balance = ZERO
        else:
            self.outstanding_balance -= value

        return Result.ok(LoanPaymentOutcome(
            loan_id=self.loan_id,
            amount=value,
            remaining_balance=self.outstanding_balance,
            paid_off=self.is_paid_off
        ))

    def amortization_schedule(self) -> List[AmortizationEntry]:
        """
        Month-by-month split of each EMI into interest and principal.

        Interest accrues on the remaining principal; the final month absorbs
        any residue so the remaining principal ends at zero.
        """
        schedule = []
        remaining = self.principal
        rate = self.monthly_rate

        for month in range(1, self.tenure_months + 1):
            interest = remaining * rate
            principal_part = self.monthly_emi - interest
            if month == self.tenure_months:
                principal_part = remaining
            remaining -= principal_part
            schedule.append(AmortizationEntry(
                month=month,
                payment=interest + principal_part,
                interest=interest,
                principal=principal_part,
                remaining_principal=remaining
            ))

        return schedule

    def snapshot(self) -> 'Loan':
        """Independent copy; changes to it never reach the directory"""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            'loan_id': self.loan_id,
            'borrower_name': self.borrower_name,
            'borrower_username': self.borrower_username,
            'principal': str(self.principal),
            'annual_rate_percent': str(self.annual_rate_percent),
            'tenure_months': self.tenure_months,
            'monthly_emi': str(self.monthly_emi),
            'outstanding_balance': str(self.outstanding_balance)
        }
