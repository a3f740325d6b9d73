"""
LedgerView - General ledger reconstruction from posted journal entries

LedgerView turns a snapshot of posted double-entry journal records into
per-account balances, a chronological transaction feed with a running
balance, and a current-month income/expense summary. It is a read/derive
layer: it never posts, approves or persists anything.

Key Features:
- **Pure core**: ``compute(entries, lines, accounts, now)`` has no I/O and no shared state
- **Sign conventions**: debit-normal assets/expenses, credit-normal everything else
- **Running balance**: accumulated in fetch order, kept as-is through the display sort
- **Pluggable sources**: in-memory snapshots or any SQL database via SQLAlchemy
- **Graceful scoping**: agency-scoped accounts when the schema supports it, global otherwise
- **Exports**: CSV export and pandas DataFrame views

Quick Start:
    ```python
    from datetime import date
    from ledgerview import compute

    result = compute(
        entries=[{"id": "je-1", "entry_date": "2026-10-02", "status": "posted"}],
        lines=[
            {"id": "l-1", "journal_entry_id": "je-1", "account_id": "cash",
             "debit_amount": "100.00", "credit_amount": "0"},
            {"id": "l-2", "journal_entry_id": "je-1", "account_id": "sales",
             "debit_amount": "0", "credit_amount": "100.00"},
        ],
        accounts=[
            {"id": "cash", "account_type": "asset", "is_active": True},
            {"id": "sales", "account_type": "revenue", "is_active": True},
        ],
        now=date(2026, 10, 19),
    )
    balances, feed, summary = result
    summary.total_balance   # Decimal('100.00')
    ```

Reading from a database:
    ```python
    from ledgerview import LedgerConfig, SqlLedgerSource, load_ledger

    source = SqlLedgerSource("postgresql+psycopg://ledger@db/erp")
    result = load_ledger(source, LedgerConfig(agency_id="agency-1"))
    ```
"""

# Version information
__version__ = "0.1.0"
__author__ = "LedgerView Team"
__description__ = "General ledger reconstruction from posted journal entries"

from .core import (
    Account,
    AccountBalance,
    AccountRegistry,
    AccountType,
    Category,
    InMemorySource,
    JournalEntry,
    JournalEntryLine,
    LedgerConfig,
    LedgerDataError,
    LedgerError,
    LedgerFetchError,
    LedgerResult,
    LedgerSnapshot,
    LedgerSource,
    LedgerSummary,
    MissingScopeColumnError,
    SnapshotError,
    SqlLedgerSource,
    Transaction,
    TransactionType,
    compute,
    filter_transactions,
    load_ledger,
    load_snapshot,
    transactions_of_type,
)
from .export import export_filename, export_ledger_csv, read_ledger_csv
from .frames import balances_frame, monthly_totals, transactions_frame

# Define what gets imported with "from ledgerview import *"
__all__ = [
    # Engine
    "compute",
    "load_ledger",
    "LedgerConfig",
    "LedgerResult",
    "LedgerSummary",
    # Records
    "JournalEntry",
    "JournalEntryLine",
    "Account",
    "AccountBalance",
    "AccountRegistry",
    "AccountType",
    "Category",
    "Transaction",
    "TransactionType",
    # Sources
    "LedgerSource",
    "InMemorySource",
    "SqlLedgerSource",
    "LedgerSnapshot",
    "load_snapshot",
    # Feed helpers
    "filter_transactions",
    "transactions_of_type",
    # Exports
    "export_ledger_csv",
    "export_filename",
    "read_ledger_csv",
    "transactions_frame",
    "balances_frame",
    "monthly_totals",
    # Errors
    "LedgerError",
    "LedgerFetchError",
    "LedgerDataError",
    "MissingScopeColumnError",
    "SnapshotError",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]
