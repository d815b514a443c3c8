"""
Account Module

Customer deposit accounts: a balance, a holder, a free-form account type and
an append-only log of the transaction records posted to the account.
"""

import copy
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Tuple

from .money import Amount, to_decimal
from .result import ErrorType, Result
from .transactions import TransactionRecord


class AccountType(Enum):
    """Conventional account types; any string is accepted on an Account"""
    SAVING = "Saving"
    CURRENT = "Current"


@dataclass
class Account:
    """
    Bank account owned by a single username.

    ``account_number`` and ``owner_username`` are fixed at creation. The
    balance only moves through ``deposit`` and ``withdraw``; neither appends
    a log entry, that is left to the transfer layer.
    """
    account_number: int
    holder_name: str
    balance: Decimal
    account_type: str
    owner_username: str
    transaction_log: List[TransactionRecord] = field(default_factory=list)

    _IMMUTABLE_FIELDS = ('account_number', 'owner_username')

    def __post_init__(self):
        self.balance = to_decimal(self.balance, "balance")
        if isinstance(self.account_type, AccountType):
            self.account_type = self.account_type.value

    def __setattr__(self, name, value):
        if name in self._IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"{name} cannot be changed after creation")
        super().__setattr__(name, value)

    def deposit(self, amount: Amount) -> Decimal:
        """Credit the balance unconditionally and return the new balance"""
        self.balance += to_decimal(amount)
        return self.balance

    def withdraw(self, amount: Amount) -> Result[Decimal]:
        """Debit the balance, refusing when funds are short"""
        value = to_decimal(amount)
        if value > self.balance:
            return Result.fail("Insufficient balance", ErrorType.INSUFFICIENT_BALANCE)
        self.balance -= value
        return Result.ok(self.balance)

    def add_transaction_record(self, record: TransactionRecord) -> None:
        self.transaction_log.append(record)

    def modify(self, new_name: str, new_type: str) -> None:
        """Replace the holder name and account type"""
        self.holder_name = new_name
        self.account_type = new_type.value if isinstance(new_type, AccountType) else new_type

    def transaction_history(self) -> Tuple[TransactionRecord, ...]:
        """Records posted to this account, oldest first"""
        return tuple(self.transaction_log)

    def snapshot(self) -> 'Account':
        """Independent copy; changes to it never reach the directory"""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            'account_number': self.account_number,
            'holder_name': self.holder_name,
            'account_type': self.account_type,
            'balance': str(self.balance),
            'owner_username': self.owner_username,
            'transaction_count': len(self.transaction_log)
        }
