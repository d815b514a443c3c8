"""
Test suite for result values
"""

import pytest

from wisevault.result import Result, ErrorType, not_found_or_unauthorized


class TestResult:
    """Test Result functionality"""

    def test_ok(self):
        """Test successful result"""
        result = Result.ok(42)
        assert result.success
        assert bool(result)
        assert result.value == 42
        assert result.error is None
        assert result.unwrap() == 42

    def test_fail(self):
        """Test failed result"""
        result = Result.fail("Insufficient balance", ErrorType.INSUFFICIENT_BALANCE)
        assert not result
        assert result.error == "Insufficient balance"
        assert result.error_type == ErrorType.INSUFFICIENT_BALANCE
        assert result.unwrap_or("fallback") == "fallback"

    def test_unwrap_failure_raises(self):
        """Test unwrap on failure raises ValueError"""
        result = Result.fail("bad", ErrorType.INVALID_NUMERIC_INPUT)
        with pytest.raises(ValueError, match="bad"):
            result.unwrap()

    def test_ok_without_value_is_truthy(self):
        """Test success without a payload is still truthy"""
        assert Result.ok()

    def test_not_found_or_unauthorized(self):
        """Test merged lookup failure message"""
        result = not_found_or_unauthorized("Loan", 7)
        assert result.error_type == ErrorType.NOT_FOUND_OR_UNAUTHORIZED
        assert result.error == "Loan 7 not found or permission denied"
