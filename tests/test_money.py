"""
Test suite for money helpers

Decimal coercion must never go through binary float arithmetic.
"""

import pytest
from decimal import Decimal

from wisevault.exceptions import InvalidNumericInputError
from wisevault.money import MAX_MAGNITUDE, to_decimal, to_positive_decimal, quantize, format_amount


class TestCoercion:
    """Test Decimal coercion"""

    def test_float_goes_through_str(self):
        """Test 0.1 becomes exactly 0.1"""
        assert to_decimal(0.1) == Decimal('0.1')

    def test_int_and_str(self):
        """Test ints and numeric strings"""
        assert to_decimal(5) == Decimal('5')
        assert to_decimal("12.345") == Decimal('12.345')

    def test_decimal_passthrough(self):
        """Test Decimal values are returned unchanged"""
        value = Decimal('3.14')
        assert to_decimal(value) is value

    @pytest.mark.parametrize("value", ["abc", None, True, float('inf'), Decimal('NaN')])
    def test_rejects_non_numbers(self, value):
        """Test garbage, booleans and non-finite values are rejected"""
        with pytest.raises(InvalidNumericInputError):
            to_decimal(value)

    def test_error_names_field(self):
        """Test the error carries the field name"""
        with pytest.raises(InvalidNumericInputError) as exc_info:
            to_decimal("x", "principal")
        assert exc_info.value.field_name == "principal"
        assert "principal" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["1e500000", Decimal('-9e999999'), 10 ** 16])
    def test_rejects_huge_magnitudes(self, value):
        """Test values beyond the accepted magnitude are rejected"""
        with pytest.raises(InvalidNumericInputError, match="too large"):
            to_decimal(value)

    def test_magnitude_limit_inclusive(self):
        """Test the limit itself is accepted"""
        assert to_decimal(MAX_MAGNITUDE) == Decimal('1e15')

    @pytest.mark.parametrize("value", [0, -1, "-0.01"])
    def test_positive_required(self, value):
        """Test non-positive values are rejected"""
        with pytest.raises(InvalidNumericInputError, match="must be positive"):
            to_positive_decimal(value)


class TestDisplay:
    """Test rounding and formatting"""

    def test_quantize_half_up(self):
        """Test half-up rounding to two places"""
        assert quantize(Decimal('2.345')) == Decimal('2.35')
        assert quantize(Decimal('2.344')) == Decimal('2.34')

    def test_quantize_zero_places(self):
        """Test whole-unit rounding"""
        assert quantize(Decimal('2.5'), 0) == Decimal('3')

    def test_format_amount(self):
        """Test display formatting"""
        assert format_amount(Decimal('1234.5')) == "INR 1,234.50"
        assert format_amount(Decimal('0')) == "INR 0.00"
