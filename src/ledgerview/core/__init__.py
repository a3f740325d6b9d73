"""
Core module for LedgerView.

This module contains the ledger reconstruction engine: account classification,
balance accumulation, the transaction feed and the period summary.
"""

from .accounts import AccountRegistry, AccountType, Category, classify_category
from .balances import AccountBalance, accumulate_balances, total_balance
from .engine import LedgerConfig, LedgerResult, compute, load_ledger, scope_entries
from .errors import (
    LedgerDataError,
    LedgerError,
    LedgerFetchError,
    MissingScopeColumnError,
    SnapshotError,
    is_missing_scope_column,
)
from .feed import (
    Transaction,
    TransactionType,
    build_feed,
    filter_transactions,
    sort_for_display,
    transactions_of_type,
)
from .models import Account, JournalEntry, JournalEntryLine
from .period import LedgerSummary, PeriodTotals, summarize_period
from .snapshot_loader import LedgerSnapshot, load_snapshot
from .sources import (
    InMemorySource,
    LedgerSource,
    SourceCapabilities,
    SqlLedgerSource,
    probe_capabilities,
)

__all__ = [
    # Errors
    "LedgerError",
    "LedgerFetchError",
    "LedgerDataError",
    "MissingScopeColumnError",
    "SnapshotError",
    "is_missing_scope_column",
    # Records
    "JournalEntry",
    "JournalEntryLine",
    "Account",
    # Accounts
    "AccountRegistry",
    "AccountType",
    "Category",
    "classify_category",
    # Balances
    "AccountBalance",
    "accumulate_balances",
    "total_balance",
    # Feed
    "Transaction",
    "TransactionType",
    "build_feed",
    "sort_for_display",
    "filter_transactions",
    "transactions_of_type",
    # Period
    "LedgerSummary",
    "PeriodTotals",
    "summarize_period",
    # Engine
    "LedgerConfig",
    "LedgerResult",
    "compute",
    "load_ledger",
    "scope_entries",
    # Sources
    "LedgerSource",
    "SourceCapabilities",
    "InMemorySource",
    "SqlLedgerSource",
    "probe_capabilities",
    # Snapshots
    "LedgerSnapshot",
    "load_snapshot",
]
