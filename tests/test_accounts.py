"""
Test suite for accounts module

Tests balance movements, log appends, modification and snapshot isolation.
"""

import pytest
from decimal import Decimal

from wisevault.accounts import Account, AccountType
from wisevault.result import ErrorType
from wisevault.transactions import TransactionRecord, TransactionKind


class TestAccount:
    """Test Account class functionality"""

    def setup_method(self):
        """Set up test fixtures"""
        self.account = Account(
            account_number=1001,
            holder_name="Asha Rao",
            balance=Decimal('500.00'),
            account_type="Saving",
            owner_username="asha"
        )

    def test_valid_account(self):
        """Test creating a valid account"""
        assert self.account.account_number == 1001
        assert self.account.holder_name == "Asha Rao"
        assert self.account.balance == Decimal('500.00')
        assert self.account.account_type == "Saving"
        assert self.account.owner_username == "asha"
        assert self.account.transaction_log == []

    def test_balance_coerced_to_decimal(self):
        """Test that int and float balances become Decimal"""
        account = Account(1002, "B", 100.1, "Current", "b")
        assert isinstance(account.balance, Decimal)
        assert account.balance == Decimal('100.1')

    def test_account_type_enum_accepted(self):
        """Test that AccountType enum values are stored as strings"""
        account = Account(1002, "B", 0, AccountType.CURRENT, "b")
        assert account.account_type == "Current"

    def test_deposit_increases_balance(self):
        """Test deposit adds to balance without logging"""
        new_balance = self.account.deposit(Decimal('250.50'))

        assert new_balance == Decimal('750.50')
        assert self.account.balance == Decimal('750.50')
        assert self.account.transaction_log == []

    def test_withdraw_decreases_balance(self):
        """Test withdraw within balance"""
        result = self.account.withdraw(Decimal('200'))

        assert result.success
        assert result.value == Decimal('300.00')
        assert self.account.balance == Decimal('300.00')
        assert self.account.transaction_log == []

    def test_withdraw_entire_balance(self):
        """Test that withdrawing exactly the balance is allowed"""
        result = self.account.withdraw(Decimal('500.00'))
        assert result.success
        assert self.account.balance == Decimal('0')

    def test_withdraw_insufficient_balance(self):
        """Test withdraw beyond balance is refused without state change"""
        result = self.account.withdraw(Decimal('500.01'))

        assert not result.success
        assert result.error_type == ErrorType.INSUFFICIENT_BALANCE
        assert self.account.balance == Decimal('500.00')

    def test_add_transaction_record(self):
        """Test records are appended in order without validation"""
        first = TransactionRecord(1001, TransactionKind.DEPOSIT, Decimal('10'))
        foreign = TransactionRecord(9999, TransactionKind.WITHDRAW, Decimal('5'))

        self.account.add_transaction_record(first)
        self.account.add_transaction_record(foreign)

        assert self.account.transaction_history() == (first, foreign)

    def test_modify(self):
        """Test modifying holder name and type"""
        self.account.modify("Asha R. Rao", "Current")

        assert self.account.holder_name == "Asha R. Rao"
        assert self.account.account_type == "Current"

    def test_modify_accepts_free_form_type(self):
        """Test that unconventional account types are not rejected"""
        self.account.modify("Asha", "Fixed Deposit")
        assert self.account.account_type == "Fixed Deposit"

    def test_account_number_immutable(self):
        """Test that account number cannot be reassigned"""
        with pytest.raises(AttributeError, match="account_number"):
            self.account.account_number = 2000
        assert self.account.account_number == 1001

    def test_owner_immutable(self):
        """Test that owner cannot be reassigned"""
        with pytest.raises(AttributeError, match="owner_username"):
            self.account.owner_username = "mallory"

    def test_snapshot_isolation(self):
        """Test that a snapshot is detached from the original"""
        self.account.add_transaction_record(
            TransactionRecord(1001, TransactionKind.DEPOSIT, Decimal('1'))
        )
        copy = self.account.snapshot()

        copy.deposit(Decimal('1000'))
        copy.modify("Someone Else", "Current")
        copy.add_transaction_record(TransactionRecord(1001, TransactionKind.DEPOSIT, Decimal('2')))

        assert self.account.balance == Decimal('500.00')
        assert self.account.holder_name == "Asha Rao"
        assert len(self.account.transaction_log) == 1
        assert copy.account_number == self.account.account_number

    def test_history_is_a_copy(self):
        """Test that the returned history tuple cannot alter the log"""
        history = self.account.transaction_history()
        assert isinstance(history, tuple)
        assert len(self.account.transaction_log) == 0

    def test_to_dict(self):
        """Test dict conversion"""
        data = self.account.to_dict()
        assert data['account_number'] == 1001
        assert data['balance'] == "500.00"
        assert data['transaction_count'] == 0
