"""
CSV export of the transaction feed.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import IO, Optional, Union

import pandas as pd

from .core.currency import format_amount, to_decimal
from .core.feed import Transaction

CSV_HEADERS = [
    "Date",
    "Reference",
    "Description",
    "Category",
    "Type",
    "Amount",
    "Balance",
]

INVALID_DATE = "Invalid Date"


def export_filename(today: Optional[date] = None) -> str:
    """File name for an export made on ``today``: ledger_export_<ISO-date>.csv."""
    today = today or date.today()
    return f"ledger_export_{today.isoformat()}.csv"


def format_date(txn: Transaction) -> str:
    """ISO date of a transaction, or 'Invalid Date' when it has none."""
    ts = txn.timestamp
    if ts is None:
        return INVALID_DATE
    return ts.date().isoformat()


def ledger_rows(feed: Iterable[Transaction]) -> list[list[str]]:
    """Rows of the export, one per transaction, in feed order."""
    return [
        [
            format_date(txn),
            txn.reference,
            txn.description,
            txn.category.value,
            txn.type.value.upper(),
            format_amount(txn.amount),
            format_amount(txn.balance),
        ]
        for txn in feed
    ]


def export_ledger_csv(
    feed: Iterable[Transaction],
    path: Union[str, Path, None] = None,
    today: Optional[date] = None,
) -> str:
    """
    Export transactions to CSV.

    Every cell is double-quoted (embedded quotes doubled). A row whose date
    cannot be parsed is written with 'Invalid Date' rather than failing the
    export.

    Args:
        feed: Transactions, normally in display order
        path: Output file, or a directory to write ``export_filename(today)``
            into; nothing is written when omitted
        today: Date used for the file name (defaults to today)

    Returns:
        The CSV text
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(ledger_rows(feed))
    text = buf.getvalue()

    if path is not None:
        target = Path(path)
        if target.is_dir():
            target = target / export_filename(today)
        target.write_text(text, encoding="utf-8")
    return text


def read_ledger_csv(source: Union[str, Path, IO[str]]) -> pd.DataFrame:
    """
    Parse an exported ledger back into a DataFrame.

    Text columns stay strings; Amount and Balance become Decimal.
    """
    df = pd.read_csv(source, dtype=str, keep_default_na=False)
    missing = [col for col in CSV_HEADERS if col not in df.columns]
    if missing:
        raise ValueError(f"Not a ledger export, missing columns: {missing}")
    for col in ("Amount", "Balance"):
        df[col] = df[col].map(lambda v, c=col: to_decimal(v, c.lower()))
    return df


def ledger_tuples(df: pd.DataFrame) -> list[tuple[str, Decimal, Decimal]]:
    """(date, amount, balance) per row of a parsed export."""
    return list(zip(df["Date"], df["Amount"], df["Balance"]))
