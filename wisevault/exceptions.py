"""Exceptions raised inside the domain model and converted to Results at its edge."""

from typing import Optional


class WiseVaultError(Exception):
    """Base exception for all WiseVault errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidNumericInputError(WiseVaultError, ValueError):
    """Raised when an amount, rate or tenure is outside its numeric domain"""

    def __init__(self, field_name: str, value, reason: str):
        super().__init__(
            f"Invalid {field_name}: {reason}",
            {'field': field_name, 'value': str(value)}
        )
        self.field_name = field_name
