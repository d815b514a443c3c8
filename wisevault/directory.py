"""
Ledger Directory Module

Owns every account and loan in the session, issues sequential account
numbers and loan IDs, answers ownership-scoped lookups, and keeps the global
transaction log in step with the per-account logs.

Authorization for every scoped lookup is ``is_manager or owner == caller``.
A failed lookup does not say whether the entity is missing or belongs to
someone else; the audit trail records which of the two happened.
"""

import dataclasses
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .accounts import Account
from .audit import AuditTrail, AuditEventType
from .auth import AuthContext, is_authorized
from .config import get_config
from .exceptions import InvalidNumericInputError
from .loans import Loan, LoanPaymentOutcome
from .logging_config import get_logger, log_action
from .money import Amount, ZERO, to_decimal
from .result import ErrorType, Result, not_found_or_unauthorized
from .transactions import TransactionKind, TransactionRecord, TransferOperations

E = TypeVar('E')


class LedgerDirectory:
    """
    In-memory registry of accounts and loans for a single session
    """

    def __init__(
        self,
        audit_trail: Optional[AuditTrail] = None,
        transfers: Optional[TransferOperations] = None,
        first_account_number: Optional[int] = None,
        first_loan_id: Optional[int] = None,
        default_rate_percent: Optional[Amount] = None
    ):
        settings = get_config()

        self.audit_trail = audit_trail if audit_trail is not None else AuditTrail(
            enabled=settings.enable_audit_logging
        )
        self.transfers = transfers if transfers is not None else TransferOperations()
        self.logger = get_logger("wisevault.directory")

        self.next_account_number = (
            first_account_number if first_account_number is not None
            else settings.first_account_number
        )
        self.next_loan_id = first_loan_id if first_loan_id is not None else settings.first_loan_id
        self.default_rate_percent = to_decimal(
            default_rate_percent if default_rate_percent is not None
            else settings.default_loan_rate_percent,
            "default_rate_percent"
        )

        self._accounts: List[Account] = []
        self._loans: List[Loan] = []
        self._transactions: List[TransactionRecord] = []

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(
        self,
        name: str,
        initial_balance: Amount,
        account_type: str,
        owner_username: str
    ) -> Result[int]:
        """
        Open an account with the next sequential number.

        The opening balance is set directly; no transaction record is
        written for it.

        Returns:
            Result holding the new account number
        """
        try:
            balance = to_decimal(initial_balance, "initial_balance")
        except InvalidNumericInputError as e:
            return self._invalid(e, "create_account", owner_username)
        if balance < ZERO:
            return self._invalid(
                InvalidNumericInputError("initial_balance", initial_balance, "must not be negative"),
                "create_account", owner_username
            )

        account_number = self.next_account_number
        self.next_account_number += 1

        account = Account(
            account_number=account_number,
            holder_name=name,
            balance=balance,
            account_type=account_type,
            owner_username=owner_username
        )
        self._accounts.append(account)

        self.audit_trail.log_event(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_number,
            metadata={
                "holder_name": name,
                "account_type": account.account_type,
                "opening_balance": balance,
                "owner_username": owner_username
            },
            user_id=owner_username
        )
        log_action(self.logger, "info", f"Account {account_number} created",
                   user_id=owner_username, action="create_account",
                   resource=f"account:{account_number}")

        return Result.ok(account_number)

    def get_accounts_for_user(self, username: str) -> List[Account]:
        """Snapshots of every account owned by ``username``, in creation order"""
        return [acc.snapshot() for acc in self._accounts if acc.owner_username == username]

    def find_account(
        self,
        account_number: int,
        username: str = "",
        is_manager: bool = False
    ) -> Result[Account]:
        """
        Look up a live account the caller may act on.

        Returns:
            Result holding the account itself (not a copy); valid for the
            current operation only
        """
        account = self._locate(
            self._accounts, lambda acc: acc.account_number == account_number,
            lambda acc: acc.owner_username, username, is_manager, "account", account_number
        )
        if account is None:
            return not_found_or_unauthorized("Account", account_number)
        return Result.ok(account)

    def close_account(
        self,
        account_number: int,
        username: str = "",
        is_manager: bool = False
    ) -> Result[int]:
        """Remove the first matching account the caller may act on; its log is discarded"""
        for index, account in enumerate(self._accounts):
            if account.account_number == account_number and \
                    is_authorized(account.owner_username, username, is_manager):
                del self._accounts[index]
                self.audit_trail.log_event(
                    event_type=AuditEventType.ACCOUNT_CLOSED,
                    entity_type="account",
                    entity_id=account_number,
                    metadata={
                        "final_balance": account.balance,
                        "discarded_records": len(account.transaction_log),
                        "closed_by_manager": is_manager
                    },
                    user_id=username or None
                )
                log_action(self.logger, "info", f"Account {account_number} closed",
                           user_id=username or None, action="close_account",
                           resource=f"account:{account_number}")
                return Result.ok(account_number)

        self._record_miss(
            "account", account_number, username,
            any(acc.account_number == account_number for acc in self._accounts)
        )
        return not_found_or_unauthorized("Account", account_number)

    def modify_account(
        self,
        context: AuthContext,
        account_number: int,
        new_name: str,
        new_type: str
    ) -> Result[Account]:
        """Change holder name and account type; returns a snapshot of the result"""
        found = self.find_account(account_number, context.username, context.is_manager)
        if not found:
            return found

        account = found.value
        old_name, old_type = account.holder_name, account.account_type
        account.modify(new_name, new_type)

        self.audit_trail.log_event(
            event_type=AuditEventType.ACCOUNT_MODIFIED,
            entity_type="account",
            entity_id=account_number,
            metadata={
                "old_name": old_name,
                "new_name": account.holder_name,
                "old_type": old_type,
                "new_type": account.account_type
            },
            user_id=context.username
        )
        return Result.ok(account.snapshot())

    def list_all_accounts(self, context: AuthContext) -> Result[List[Account]]:
        """Snapshots of every account; managers only"""
        if not context.is_manager:
            self._record_denied("directory", "accounts", context.username)
            return Result.fail("Listing all accounts requires the manager role",
                               ErrorType.NOT_FOUND_OR_UNAUTHORIZED)
        return Result.ok([acc.snapshot() for acc in self._accounts])

    # ------------------------------------------------------------------
    # Balance movements
    # ------------------------------------------------------------------

    def deposit(self, context: AuthContext, account_number: int,
                amount: Amount) -> Result[TransactionRecord]:
        """Deposit into an account, logging the record locally and globally"""
        return self._transfer(context, account_number, amount, self.transfers.deposit)

    def withdraw(self, context: AuthContext, account_number: int,
                 amount: Amount) -> Result[TransactionRecord]:
        """Withdraw from an account, logging the record locally and globally"""
        return self._transfer(context, account_number, amount, self.transfers.withdraw)

    def _transfer(
        self,
        context: AuthContext,
        account_number: int,
        amount: Amount,
        operation: Callable[..., Result[TransactionRecord]]
    ) -> Result[TransactionRecord]:
        found = self.find_account(account_number, context.username, context.is_manager)
        if not found:
            return found

        account = found.value
        with self._atomic(account):
            result = operation(account, amount, context)
            if result:
                self.record_global_transaction(dataclasses.replace(result.value))

        self._audit_transfer(context, account_number, amount, result)
        return result

    def _audit_transfer(self, context: AuthContext, account_number: int,
                        amount: Amount, result: Result[TransactionRecord]) -> None:
        if result:
            self.audit_trail.log_event(
                event_type=AuditEventType.TRANSACTION_POSTED,
                entity_type="account",
                entity_id=account_number,
                metadata={"kind": result.value.kind, "amount": result.value.amount},
                user_id=context.username
            )
        else:
            self.audit_trail.log_event(
                event_type=AuditEventType.TRANSACTION_REJECTED,
                entity_type="account",
                entity_id=account_number,
                metadata={"amount": str(amount), "error_type": result.error_type},
                user_id=context.username
            )

    def transaction_history(
        self,
        context: AuthContext,
        account_number: int
    ) -> Result[Tuple[TransactionRecord, ...]]:
        """Records posted to one account, oldest first"""
        found = self.find_account(account_number, context.username, context.is_manager)
        if not found:
            return found
        return Result.ok(found.value.transaction_history())

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------

    def apply_loan(
        self,
        borrower_name: str,
        username: str,
        principal: Amount,
        tenure_years: int,
        rate: Optional[Amount] = None
    ) -> Result[int]:
        """
        Originate a loan with the next sequential ID.

        Args:
            borrower_name: Display name of the borrower
            username: Owner of the loan
            principal: Amount borrowed, positive
            tenure_years: Whole years, at least one
            rate: Annual percentage rate; defaults to the configured rate

        Returns:
            Result holding the new loan ID. Degenerate terms fail with
            INVALID_NUMERIC_INPUT and do not consume an ID.
        """
        annual_rate = self.default_rate_percent if rate is None else rate
        try:
            loan = Loan.originate(
                loan_id=self.next_loan_id,
                borrower_name=borrower_name,
                borrower_username=username,
                principal=principal,
                tenure_years=tenure_years,
                annual_rate_percent=annual_rate
            )
        except InvalidNumericInputError as e:
            return self._invalid(e, "apply_loan", username)

        self.next_loan_id += 1
        self._loans.append(loan)

        self.audit_trail.log_event(
            event_type=AuditEventType.LOAN_APPLIED,
            entity_type="loan",
            entity_id=loan.loan_id,
            metadata={
                "borrower_name": borrower_name,
                "principal": loan.principal,
                "annual_rate_percent": loan.annual_rate_percent,
                "tenure_months": loan.tenure_months,
                "monthly_emi": loan.monthly_emi
            },
            user_id=username
        )
        log_action(self.logger, "info", f"Loan {loan.loan_id} originated",
                   user_id=username, action="apply_loan", resource=f"loan:{loan.loan_id}")

        return Result.ok(loan.loan_id)

    def get_loans_for_user(self, username: str) -> List[Loan]:
        """Snapshots of every loan owned by ``username``, in creation order"""
        return [loan.snapshot() for loan in self._loans if loan.borrower_username == username]

    def find_loan(
        self,
        loan_id: int,
        username: str = "",
        is_manager: bool = False
    ) -> Result[Loan]:
        """Look up a live loan the caller may act on"""
        loan = self._locate(
            self._loans, lambda ln: ln.loan_id == loan_id,
            lambda ln: ln.borrower_username, username, is_manager, "loan", loan_id
        )
        if loan is None:
            return not_found_or_unauthorized("Loan", loan_id)
        return Result.ok(loan)

    def list_all_loans(self, context: AuthContext) -> Result[List[Loan]]:
        """Snapshots of every loan; managers only"""
        if not context.is_manager:
            self._record_denied("directory", "loans", context.username)
            return Result.fail("Listing all loans requires the manager role",
                               ErrorType.NOT_FOUND_OR_UNAUTHORIZED)
        return Result.ok([loan.snapshot() for loan in self._loans])

    def make_loan_payment(
        self,
        context: AuthContext,
        loan_id: int,
        amount: Amount
    ) -> Result[LoanPaymentOutcome]:
        """
        Apply a payment to a loan and log it.

        The Loan Payment record goes to the caller's first account (in
        directory order) and to the global log. A caller without accounts
        still gets the payment applied, with nothing logged.
        """
        found = self.find_loan(loan_id, context.username, context.is_manager)
        if not found:
            return found

        loan = found.value
        account = next(
            (acc for acc in self._accounts if acc.owner_username == context.username),
            None
        )

        with self._atomic(account, loan):
            outcome = loan.make_payment(amount)
            if outcome and account is not None:
                record = TransactionRecord(account.account_number, TransactionKind.LOAN_PAYMENT,
                                           outcome.value.amount)
                account.add_transaction_record(record)
                self.record_global_transaction(dataclasses.replace(record))
                outcome = Result.ok(dataclasses.replace(
                    outcome.value, recorded_account_number=account.account_number
                ))

        if not outcome:
            log_action(self.logger, "warning", outcome.error, user_id=context.username,
                       action="loan_payment", resource=f"loan:{loan_id}")
            return outcome

        payment = outcome.value
        self.audit_trail.log_event(
            event_type=AuditEventType.LOAN_PAID_OFF if payment.paid_off
            else AuditEventType.LOAN_PAYMENT_MADE,
            entity_type="loan",
            entity_id=loan_id,
            metadata={
                "amount": payment.amount,
                "remaining_balance": payment.remaining_balance,
                "recorded_account_number": payment.recorded_account_number
            },
            user_id=context.username
        )
        if payment.recorded_account_number is None:
            log_action(self.logger, "warning",
                       f"No account found to record payment on loan {loan_id}",
                       user_id=context.username, action="loan_payment",
                       resource=f"loan:{loan_id}")
        return outcome

    # ------------------------------------------------------------------
    # Global log
    # ------------------------------------------------------------------

    def record_global_transaction(self, record: TransactionRecord) -> None:
        """Append to the directory-wide log; account logs are not touched"""
        self._transactions.append(record)

    def global_transactions(self, context: AuthContext) -> Result[Tuple[TransactionRecord, ...]]:
        """Directory-wide log, oldest first; managers only"""
        if not context.is_manager:
            self._record_denied("directory", "transactions", context.username)
            return Result.fail("Viewing all transactions requires the manager role",
                               ErrorType.NOT_FOUND_OR_UNAUTHORIZED)
        return Result.ok(tuple(self._transactions))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self, account: Optional[Account], loan: Optional[Loan] = None) -> Iterator[None]:
        """
        Restore balances and log lengths if the block raises, so a balance
        change and its two log entries land together or not at all.
        """
        saved_global = len(self._transactions)
        saved_account = (account.balance, len(account.transaction_log)) if account else None
        saved_loan = loan.outstanding_balance if loan else None
        try:
            yield
        except Exception:
            del self._transactions[saved_global:]
            if account is not None:
                account.balance = saved_account[0]
                del account.transaction_log[saved_account[1]:]
            if loan is not None:
                loan.outstanding_balance = saved_loan
            self.logger.exception("Ledger operation rolled back")
            raise

    def _locate(
        self,
        collection: Sequence[E],
        matches: Callable[[E], bool],
        owner_of: Callable[[E], str],
        username: str,
        is_manager: bool,
        entity_type: str,
        entity_id: int
    ) -> Optional[E]:
        exists = False
        for entity in collection:
            if matches(entity):
                exists = True
                if is_authorized(owner_of(entity), username, is_manager):
                    return entity
        self._record_miss(entity_type, entity_id, username, exists)
        return None

    def _record_miss(self, entity_type: str, entity_id: int, username: str, exists: bool) -> None:
        event_type = AuditEventType.ACCESS_DENIED if exists else AuditEventType.LOOKUP_MISSED
        self.audit_trail.log_event(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=username or None
        )
        log_action(self.logger, "warning",
                   f"{entity_type.capitalize()} {entity_id} not found or permission denied",
                   user_id=username or None, action="lookup",
                   resource=f"{entity_type}:{entity_id}",
                   extra={"reason": event_type.value})

    def _record_denied(self, entity_type: str, entity_id: str, username: str) -> None:
        self.audit_trail.log_event(
            event_type=AuditEventType.ACCESS_DENIED,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=username
        )
        log_action(self.logger, "warning", f"Manager listing of {entity_id} refused",
                   user_id=username, action="list", resource=f"{entity_type}:{entity_id}")

    def _invalid(self, error: InvalidNumericInputError, action: str, username: str) -> Result:
        log_action(self.logger, "warning", error.message, user_id=username,
                   action=action, extra=error.details)
        return Result.fail(error.message, ErrorType.INVALID_NUMERIC_INPUT)
