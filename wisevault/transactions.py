"""
Transaction Module

Immutable transaction records and the transfer operations that apply a
deposit or withdrawal to an account and log the matching record.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .auth import AuthContext
from .exceptions import InvalidNumericInputError
from .logging_config import get_logger, log_action
from .money import Amount, to_decimal, to_positive_decimal
from .result import ErrorType, Result

if TYPE_CHECKING:
    from .accounts import Account


class TransactionKind(Enum):
    """Kinds of logged balance events"""
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    LOAN_PAYMENT = "Loan Payment"


@dataclass(frozen=True)
class TransactionRecord:
    """
    Immutable record of one balance event.

    The same logical event may be held as separate copies by an account log
    and the directory's global log.
    """
    account_number: int
    kind: TransactionKind
    amount: Decimal
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        amount = to_decimal(self.amount)
        if amount <= Decimal('0'):
            raise InvalidNumericInputError("amount", self.amount, "must be positive")
        object.__setattr__(self, 'amount', amount)

    def to_dict(self) -> dict:
        return {
            'account_number': self.account_number,
            'kind': self.kind.value,
            'amount': str(self.amount),
            'timestamp': self.timestamp.isoformat()
        }


class TransferOperations:
    """
    Validates and applies deposits and withdrawals against a single account.

    Each successful operation appends exactly one record to the account's own
    log and returns it, so the caller can mirror it into other logs.
    """

    def __init__(self):
        self.logger = get_logger("wisevault.transactions")

    def deposit(
        self,
        account: 'Account',
        amount: Amount,
        context: Optional[AuthContext] = None
    ) -> Result[TransactionRecord]:
        """
        Deposit into an account.

        Args:
            account: Live account to credit
            amount: Positive amount
            context: Caller identity; accepted for privileged transfer
                rules, currently no effect

        Returns:
            Result holding the appended Deposit record
        """
        try:
            value = to_positive_decimal(amount)
        except InvalidNumericInputError as e:
            return self._reject(account, TransactionKind.DEPOSIT, amount, e.message,
                                ErrorType.INVALID_NUMERIC_INPUT, context)

        account.deposit(value)
        record = TransactionRecord(account.account_number, TransactionKind.DEPOSIT, value)
        account.add_transaction_record(record)
        self._posted(account, record, context)
        return Result.ok(record)

    def withdraw(
        self,
        account: 'Account',
        amount: Amount,
        context: Optional[AuthContext] = None
    ) -> Result[TransactionRecord]:
        """
        Withdraw from an account.

        The balance is checked here before delegating to the account, and no
        record is written when funds are short.

        Args:
            account: Live account to debit
            amount: Positive amount
            context: Caller identity; accepted for privileged transfer
                rules, currently no effect

        Returns:
            Result holding the appended Withdraw record
        """
        try:
            value = to_positive_decimal(amount)
        except InvalidNumericInputError as e:
            return self._reject(account, TransactionKind.WITHDRAW, amount, e.message,
                                ErrorType.INVALID_NUMERIC_INPUT, context)

        if account.balance < value:
            return self._reject(account, TransactionKind.WITHDRAW, value,
                                "Withdrawal failed: insufficient balance",
                                ErrorType.INSUFFICIENT_BALANCE, context)

        outcome = account.withdraw(value)
        if not outcome:
            return outcome

        record = TransactionRecord(account.account_number, TransactionKind.WITHDRAW, value)
        account.add_transaction_record(record)
        self._posted(account, record, context)
        return Result.ok(record)

    def _posted(self, account: 'Account', record: TransactionRecord,
                context: Optional[AuthContext]) -> None:
        log_action(
            self.logger, "info",
            f"{record.kind.value} of {record.amount} posted, balance {account.balance}",
            user_id=context.username if context else None,
            action=record.kind.name.lower(),
            resource=f"account:{account.account_number}"
        )

    def _reject(self, account: 'Account', kind: TransactionKind, amount, message: str,
                error_type: ErrorType, context: Optional[AuthContext]) -> Result:
        log_action(
            self.logger, "warning", message,
            user_id=context.username if context else None,
            action=kind.name.lower(),
            resource=f"account:{account.account_number}",
            extra={'amount': str(amount), 'error_type': error_type.value}
        )
        return Result.fail(message, error_type)
