"""
Reporting Module

Presentation helpers that turn the structured data returned by the directory
into display text or plain dicts. Rounding and currency formatting happen
here only; the ledger itself keeps unrounded Decimals.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .accounts import Account
from .config import get_config
from .loans import Loan
from .money import ZERO, format_amount, quantize
from .transactions import TransactionRecord


class ReportFormat(Enum):
    """Export formats"""
    TEXT = "text"
    DICT = "dict"
    JSON = "json"


def _money(amount) -> str:
    settings = get_config()
    return format_amount(amount, settings.currency_code, settings.display_precision)


def format_timestamp(timestamp: datetime) -> str:
    """ctime-style rendering, e.g. 'Sat Oct 17 12:04:00 2026'"""
    return timestamp.astimezone().strftime("%a %b %d %H:%M:%S %Y")


def format_transaction(record: TransactionRecord) -> str:
    return (f"Account: {record.account_number}, Type: {record.kind.value}, "
            f"Amount: {_money(record.amount)}, Date: {format_timestamp(record.timestamp)}")


def format_account(account: Account) -> str:
    return "\n".join([
        f"Account Number: {account.account_number}",
        f"Account Holder: {account.holder_name}",
        f"Account Type  : {account.account_type}",
        f"Balance       : {_money(account.balance)}",
    ])


def format_loan(loan: Loan) -> str:
    years = loan.tenure_years
    years_text = str(int(years)) if years == int(years) else str(years)
    return "\n".join([
        f"Loan ID          : {loan.loan_id}",
        f"Borrower Name    : {loan.borrower_name}",
        f"Principal Amount : {_money(loan.principal)}",
        f"Interest Rate    : {loan.annual_rate_percent}%",
        f"Tenure           : {years_text} years ({loan.tenure_months} months)",
        f"Monthly EMI      : {_money(loan.monthly_emi)}",
        f"Total Payable    : {_money(loan.total_payable)}",
        f"Outstanding      : {_money(loan.outstanding_balance)}",
    ])


def format_transaction_history(account_number: int,
                               records: Iterable[TransactionRecord]) -> str:
    records = list(records)
    if not records:
        return "No transactions found for this account."
    lines = [f"Transaction History for Account {account_number}:"]
    lines.extend(format_transaction(record) for record in records)
    return "\n".join(lines)


def format_listing(items: Iterable[Union[Account, Loan]], empty_message: str,
                   separator: str = "-" * 28) -> str:
    """Render a list of accounts or loans the way the manager overview shows them"""
    blocks = []
    for item in items:
        text = format_account(item) if isinstance(item, Account) else format_loan(item)
        blocks.append(f"{text}\n{separator}")
    return "\n".join(blocks) if blocks else empty_message


def account_summary(account: Account) -> Dict[str, Any]:
    """Rounded dict view of an account and its log"""
    precision = get_config().display_precision
    return {
        'account_number': account.account_number,
        'holder_name': account.holder_name,
        'account_type': account.account_type,
        'owner_username': account.owner_username,
        'balance': str(quantize(account.balance, precision)),
        'transactions': [record.to_dict() for record in account.transaction_log]
    }


def loan_summary(loan: Loan, include_schedule: bool = False) -> Dict[str, Any]:
    """Rounded dict view of a loan, optionally with its amortization schedule"""
    precision = get_config().display_precision
    summary = {
        'loan_id': loan.loan_id,
        'borrower_name': loan.borrower_name,
        'borrower_username': loan.borrower_username,
        'principal': str(quantize(loan.principal, precision)),
        'annual_rate_percent': str(loan.annual_rate_percent),
        'tenure_months': loan.tenure_months,
        'monthly_emi': str(quantize(loan.monthly_emi, precision)),
        'total_payable': str(quantize(loan.total_payable, precision)),
        'outstanding_balance': str(quantize(loan.outstanding_balance, precision)),
        'paid_off': loan.is_paid_off
    }
    if include_schedule:
        summary['schedule'] = [
            {
                'month': entry.month,
                'payment': str(quantize(entry.payment, precision)),
                'interest': str(quantize(entry.interest, precision)),
                'principal': str(quantize(entry.principal, precision)),
                'remaining_principal': str(quantize(entry.remaining_principal, precision))
            }
            for entry in loan.amortization_schedule()
        ]
    return summary


def statement(accounts: List[Account], loans: List[Loan],
              generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Combined view of one user's accounts and loans"""
    precision = get_config().display_precision
    total_balance = sum((acc.balance for acc in accounts), ZERO)
    total_owed = sum((loan.outstanding_balance for loan in loans), ZERO)
    return {
        'generated_at': (generated_at or datetime.now().astimezone()).isoformat(),
        'accounts': [account_summary(acc) for acc in accounts],
        'loans': [loan_summary(loan) for loan in loans],
        'totals': {
            'balance': str(quantize(total_balance, precision)),
            'outstanding': str(quantize(total_owed, precision))
        }
    }


def export_statement(data: Dict[str, Any], format: ReportFormat) -> Union[Dict[str, Any], str]:
    """
    Export a statement in the requested format
    """
    if format == ReportFormat.DICT:
        return data
    elif format == ReportFormat.JSON:
        return json.dumps(data, indent=2, default=str)
    elif format == ReportFormat.TEXT:
        lines = [f"Statement generated {data['generated_at']}"]
        for acc in data['accounts']:
            lines.append(f"Account {acc['account_number']} ({acc['account_type']}): "
                         f"{acc['balance']} across {len(acc['transactions'])} transactions")
        for loan in data['loans']:
            lines.append(f"Loan {loan['loan_id']}: EMI {loan['monthly_emi']}, "
                         f"outstanding {loan['outstanding_balance']}")
        return "\n".join(lines)
    else:
        raise ValueError(f"Unsupported export format: {format}")
