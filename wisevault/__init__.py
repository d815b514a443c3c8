"""
WiseVault Banking Ledger

A single-tenant banking ledger with ownership-scoped accounts and loans,
flat-rate EMI amortization, and append-only transaction logs kept per
account and globally. All monetary values use Decimal.
"""

__version__ = "1.0.0"
