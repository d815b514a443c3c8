"""
Result Module

Explicit success/failure values returned by every ledger operation, so that
callers (menus, scripts, tests) never have to catch exceptions raised deep
inside the domain model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorType(Enum):
    """Failure categories reported to callers"""
    NOT_FOUND_OR_UNAUTHORIZED = "not_found_or_unauthorized"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INVALID_NUMERIC_INPUT = "invalid_numeric_input"


@dataclass
class Result(Generic[T]):
    """
    Outcome of a ledger operation.

    Attributes:
        success: Whether the operation succeeded
        value: Return value on success, None on failure
        error: Human readable message on failure
        error_type: Failure category for programmatic handling

    Usage:
        result = directory.find_account(1001, "alice")
        if result:
            account = result.value
        elif result.error_type == ErrorType.NOT_FOUND_OR_UNAUTHORIZED:
            ...
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result"""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: ErrorType) -> 'Result[T]':
        """Create a failed result"""
        return cls(success=False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """
        Get the value, raising if the operation failed.

        Raises:
            ValueError: If the operation failed
        """
        if not self.success:
            raise ValueError(f"Result unwrap failed: {self.error}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the value or a default if the operation failed"""
        return self.value if self.success else default


def not_found_or_unauthorized(entity: str, entity_id: int) -> Result:
    """Merged lookup failure; does not reveal whether the entity exists"""
    return Result.fail(
        f"{entity} {entity_id} not found or permission denied",
        ErrorType.NOT_FOUND_OR_UNAUTHORIZED
    )
