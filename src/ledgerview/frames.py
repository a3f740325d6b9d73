"""
pandas views over ledger results.

These functions turn the feed and balances into DataFrames for tabular
display and ad-hoc analysis. Amounts are converted to float here; the engine
itself works in Decimal.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

import pandas as pd

from .core.accounts import AccountRegistry
from .core.balances import account_balances
from .core.feed import Transaction, TransactionType

TRANSACTION_COLUMNS = [
    "id",
    "date",
    "reference",
    "description",
    "category",
    "type",
    "amount",
    "balance",
    "entry_id",
    "account_id",
]

BALANCE_COLUMNS = ["account_id", "account_code", "name", "account_type", "balance"]


def transactions_frame(feed: Iterable[Transaction]) -> pd.DataFrame:
    """
    One row per transaction, in feed order.

    ``date`` is a datetime64 column with NaT for missing/unparseable dates.
    """
    records = [
        {
            "id": txn.id,
            "date": txn.timestamp,
            "reference": txn.reference,
            "description": txn.description,
            "category": txn.category.value,
            "type": txn.type.value,
            "amount": float(txn.amount),
            "balance": float(txn.balance),
            "entry_id": txn.entry_id,
            "account_id": txn.account_id,
        }
        for txn in feed
    ]
    df = pd.DataFrame.from_records(records, columns=TRANSACTION_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


def balances_frame(
    balances: Mapping[str, Decimal], registry: AccountRegistry
) -> pd.DataFrame:
    """Account summary: one row per account with a balance."""
    records = [
        {
            "account_id": row.account_id,
            "account_code": row.account_code,
            "name": row.name,
            "account_type": row.account_type.value,
            "balance": float(row.balance),
        }
        for row in account_balances(balances, registry)
    ]
    return pd.DataFrame.from_records(records, columns=BALANCE_COLUMNS)


def monthly_totals(feed: Iterable[Transaction]) -> pd.DataFrame:
    """
    Credit and debit totals per calendar month.

    Returns:
        DataFrame indexed by monthly Period with columns income, expenses, net,
        oldest month first. Undated transactions are left out.
    """
    df = transactions_frame(feed).dropna(subset=["date"]).copy()
    if df.empty:
        return pd.DataFrame(
            columns=["income", "expenses", "net"],
            index=pd.PeriodIndex([], freq="M", name="month"),
        )

    df["month"] = df["date"].dt.to_period("M")
    df["income"] = df["amount"].where(df["type"] == TransactionType.CREDIT.value, 0.0)
    df["expenses"] = df["amount"].where(df["type"] == TransactionType.DEBIT.value, 0.0)
    out = df.groupby("month")[["income", "expenses"]].sum().sort_index()
    out["net"] = out["income"] - out["expenses"]
    return out
