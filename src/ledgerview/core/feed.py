"""
Transaction feed: display-ready rows built from posted entries and their lines.

The feed is built in two passes. The first walks entries and lines in fetch
order and attaches a running balance to every row. The second re-sorts the
rows for display (newest first). The running balance is never recomputed
after the sort, so a displayed row shows the balance as of its position in
fetch order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .accounts import AccountRegistry, Category
from .currency import ZERO
from .models import JournalEntry, JournalEntryLine
from .utils import coerce_datetime

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Transaction"


class TransactionType(Enum):
    """Side of a transaction row."""

    CREDIT = "credit"
    DEBIT = "debit"


@dataclass(frozen=True)
class Transaction:
    """
    A display row of the ledger.

    Attributes:
        id: Line id
        date: Date value as stored on the entry (may be None or unparseable)
        description: Line description, else entry description, else 'Transaction'
        category: Display category derived from the account type
        type: CREDIT if the line has a positive credit, else DEBIT
        amount: Positive amount of the nonzero side
        balance: Running balance at the point this row was accumulated
        reference: Entry reference, else entry number, else 'JE-<id prefix>'
        entry_id: Owning journal entry
        account_id: Account the line posts to (may be unresolved)
    """

    id: str
    date: Any
    description: str
    category: Category
    type: TransactionType
    amount: Decimal
    balance: Decimal
    reference: str
    entry_id: str
    account_id: Optional[str] = None

    @property
    def is_credit(self) -> bool:
        return self.type is TransactionType.CREDIT

    @property
    def timestamp(self) -> Optional[datetime]:
        """Parsed date, or None when missing or unparseable."""
        return coerce_datetime(self.date)


def entry_reference(entry: JournalEntry) -> str:
    """Reference shown for an entry: reference, entry number, or 'JE-' + id prefix."""
    return entry.reference or entry.entry_number or f"JE-{str(entry.id)[:8]}"


def entry_date(entry: JournalEntry) -> Any:
    """Date of an entry, falling back to its creation timestamp."""
    return entry.entry_date or entry.created_at or None


def _lines_by_entry(
    lines: Iterable[JournalEntryLine],
) -> dict[str, list[JournalEntryLine]]:
    grouped: dict[str, list[JournalEntryLine]] = {}
    for line in lines:
        grouped.setdefault(line.journal_entry_id, []).append(line)
    return grouped


def build_feed(
    entries: Sequence[JournalEntry],
    lines: Iterable[JournalEntryLine],
    registry: AccountRegistry,
) -> list[Transaction]:
    """
    Build transaction rows with running balances, in fetch order.

    Every line with a positive amount produces a row, including lines whose
    account is not in the registry (category OTHER). Credits add to the running
    balance and debits subtract from it. Credit wins when both sides are
    positive.

    Args:
        entries: Posted entries in fetch order
        lines: Their lines, in fetch order
        registry: Active accounts

    Returns:
        Transactions in accumulation order
    """
    grouped = _lines_by_entry(lines)
    feed: list[Transaction] = []
    running = ZERO

    for entry in entries:
        for line in grouped.get(entry.id, ()):
            if not line.id:
                continue

            is_credit = line.credit_amount > 0
            amount = line.credit_amount if is_credit else line.debit_amount
            if amount <= 0:
                continue

            running += amount if is_credit else -amount
            feed.append(
                Transaction(
                    id=line.id,
                    date=entry_date(entry),
                    description=line.description
                    or entry.description
                    or DEFAULT_DESCRIPTION,
                    category=registry.category_of(line.account_id),
                    type=TransactionType.CREDIT if is_credit else TransactionType.DEBIT,
                    amount=amount,
                    balance=running,
                    reference=entry_reference(entry),
                    entry_id=entry.id,
                    account_id=line.account_id,
                )
            )

    logger.debug("Built %d transaction(s) from %d entries", len(feed), len(entries))
    return feed


def _display_key(txn: Transaction) -> tuple[int, datetime]:
    ts = txn.timestamp
    if ts is None:
        return (1, datetime.min)
    return (0, ts)


def sort_for_display(feed: Iterable[Transaction]) -> list[Transaction]:
    """
    Order transactions newest first.

    Rows without a usable date come first. Ties keep their original order
    (``sorted`` stays stable with ``reverse=True``). Balances are left as
    attached during accumulation.
    """
    return sorted(feed, key=_display_key, reverse=True)


def filter_transactions(
    feed: Iterable[Transaction], term: str | None
) -> list[Transaction]:
    """
    Case-insensitive search over description, reference and category.

    An empty term keeps every row. Order is preserved.
    """
    needle = (term or "").lower()
    return [
        txn
        for txn in feed
        if needle in (txn.description or "").lower()
        or needle in (txn.reference or "").lower()
        or needle in txn.category.value.lower()
    ]


def transactions_of_type(
    feed: Iterable[Transaction], txn_type: TransactionType | str
) -> list[Transaction]:
    """Keep only credits or only debits."""
    wanted = TransactionType(txn_type)
    return [txn for txn in feed if txn.type is wanted]
