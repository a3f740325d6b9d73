"""
Record types read from the ledger store.

Entries, lines and accounts are owned by the posting subsystem; the engine
only reads a point-in-time snapshot of them. Each type has a ``from_record``
constructor that coerces a raw row (a mapping, as returned by a database
driver or a snapshot file) into a typed record.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from .currency import ZERO, to_decimal
from .errors import LedgerDataError

POSTED = "posted"


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _require_id(row: Mapping[str, Any], kind: str) -> str:
    value = row.get("id")
    if value is None or value == "":
        raise LedgerDataError(f"{kind} record is missing 'id': {dict(row)!r}")
    return str(value)


@dataclass(frozen=True)
class JournalEntry:
    """
    A journal entry header.

    Attributes:
        id: Entry identifier
        entry_date: Accounting date as stored (ISO string, date or datetime)
        status: Workflow status; only 'posted' entries reach the ledger
        description: Free-text description
        reference: External reference
        entry_number: Sequential entry number
        agency_id: Optional tenant scope
        created_at: Creation timestamp, used when entry_date is missing
    """

    id: str
    entry_date: Any = None
    status: str = POSTED
    description: Optional[str] = None
    reference: Optional[str] = None
    entry_number: Optional[str] = None
    agency_id: Optional[str] = None
    created_at: Any = None

    @property
    def is_posted(self) -> bool:
        return self.status == POSTED

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> JournalEntry:
        return cls(
            id=_require_id(row, "journal entry"),
            entry_date=row.get("entry_date"),
            status=str(row.get("status") or ""),
            description=_opt_str(row.get("description")),
            reference=_opt_str(row.get("reference")),
            entry_number=_opt_str(row.get("entry_number")),
            agency_id=_opt_str(row.get("agency_id")),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class JournalEntryLine:
    """
    One debit or credit line of a journal entry.

    Well-formed lines carry exactly one nonzero side; this is not enforced.
    """

    id: Optional[str]
    journal_entry_id: str
    account_id: Optional[str]
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    description: Optional[str] = None

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> JournalEntryLine:
        entry_id = row.get("journal_entry_id")
        if entry_id is None or entry_id == "":
            raise LedgerDataError(
                f"journal entry line is missing 'journal_entry_id': {dict(row)!r}"
            )
        return cls(
            id=_opt_str(row.get("id")),
            journal_entry_id=str(entry_id),
            account_id=_opt_str(row.get("account_id")),
            debit_amount=to_decimal(row.get("debit_amount"), "debit_amount"),
            credit_amount=to_decimal(row.get("credit_amount"), "credit_amount"),
            description=_opt_str(row.get("description")),
        )


@dataclass(frozen=True)
class Account:
    """
    A chart-of-accounts record.

    ``account_type`` keeps the raw free-text value; use
    ``AccountRegistry.type_of`` for the normalized enum.
    """

    id: str
    account_type: Optional[str] = None
    name: Optional[str] = None
    account_code: Optional[str] = None
    is_active: bool = True
    agency_id: Optional[str] = None

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> Account:
        is_active = row.get("is_active", True)
        return cls(
            id=_require_id(row, "account"),
            account_type=_opt_str(row.get("account_type")),
            name=_opt_str(row.get("account_name", row.get("name"))),
            account_code=_opt_str(row.get("account_code")),
            is_active=bool(is_active) if is_active is not None else True,
            agency_id=_opt_str(row.get("agency_id")),
        )


def coerce_entries(rows) -> list[JournalEntry]:
    """Coerce raw rows (or records) to JournalEntry, preserving order."""
    return [
        r if isinstance(r, JournalEntry) else JournalEntry.from_record(r) for r in rows
    ]


def coerce_lines(rows) -> list[JournalEntryLine]:
    """Coerce raw rows (or records) to JournalEntryLine, preserving order."""
    return [
        r if isinstance(r, JournalEntryLine) else JournalEntryLine.from_record(r)
        for r in rows
    ]


def coerce_accounts(rows) -> list[Account]:
    """Coerce raw rows (or records) to Account, preserving order."""
    return [r if isinstance(r, Account) else Account.from_record(r) for r in rows]
