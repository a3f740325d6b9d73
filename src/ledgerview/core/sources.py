"""
Read-only sources of journal entries, lines and accounts.

The engine never writes. A source hands back a point-in-time snapshot of
three record sets:

- posted journal entries, newest first, optionally capped
- the lines of a given set of entries
- active accounts, optionally scoped to an agency

Whether the accounts store can be agency-scoped at all is decided once, up
front, by ``probe_capabilities``; the fetches that follow never branch on
errors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol, Union, runtime_checkable

from sqlalchemy import MetaData, Table, create_engine, inspect, select, true
from sqlalchemy.engine import Engine

from .errors import (
    SCOPE_COLUMN,
    LedgerFetchError,
    MissingScopeColumnError,
    is_missing_scope_column,
)
from .models import (
    Account,
    JournalEntry,
    JournalEntryLine,
    coerce_accounts,
    coerce_entries,
    coerce_lines,
)
from .utils import coerce_datetime

logger = logging.getLogger(__name__)

ENTRIES = "journal_entries"
LINES = "journal_entry_lines"
ACCOUNTS = "chart_of_accounts"

Row = Union[Mapping[str, Any], JournalEntry, JournalEntryLine, Account]


@runtime_checkable
class LedgerSource(Protocol):
    """
    Contract for ledger record stores.

    Rows may be plain mappings (as returned by a database driver) or the
    record types from ``ledgerview.core.models``.
    """

    def fetch_posted_entries(self, limit: Optional[int] = None) -> Sequence[Row]:
        """Posted entries ordered by entry_date descending, at most ``limit``."""
        ...

    def fetch_entry_lines(self, entry_ids: Sequence[str]) -> Sequence[Row]:
        """Lines whose journal_entry_id is in ``entry_ids``, in store order."""
        ...

    def fetch_accounts(self, agency_id: Optional[str] = None) -> Sequence[Row]:
        """
        Active accounts, restricted to ``agency_id`` when given.

        Raises:
            MissingScopeColumnError: If agency_id is given but the store has
                no agency column
        """
        ...


def warn_unscoped_fallback() -> None:
    logger.warning(
        "%s has no %s column, falling back to global accounts",
        ACCOUNTS,
        SCOPE_COLUMN,
    )


@dataclass(frozen=True)
class SourceCapabilities:
    """What a source supports, determined before any data is fetched."""

    accounts_agency_scoped: bool = False


def probe_capabilities(
    source: LedgerSource, agency_id: Optional[str] = None
) -> SourceCapabilities:
    """
    Decide once whether accounts can be fetched agency-scoped.

    Sources that know their schema expose ``supports_agency_scope()``. For
    any other source a single scoped fetch is attempted and a missing-column
    failure is read as "unsupported".

    Raises:
        LedgerFetchError: If the probe fails for any other reason
    """
    if not agency_id:
        return SourceCapabilities(accounts_agency_scoped=False)

    declared = getattr(source, "supports_agency_scope", None)
    try:
        if callable(declared):
            scoped = bool(declared())
        else:
            source.fetch_accounts(agency_id=agency_id)
            scoped = True
    except Exception as exc:
        if is_missing_scope_column(exc):
            scoped = False
        else:
            logger.error("Error probing %s: %s", ACCOUNTS, exc)
            raise LedgerFetchError(ACCOUNTS, str(exc) or type(exc).__name__) from exc

    if not scoped:
        warn_unscoped_fallback()
    return SourceCapabilities(accounts_agency_scoped=scoped)


def _entry_sort_key(entry: JournalEntry) -> tuple[int, datetime]:
    ts = coerce_datetime(entry.entry_date)
    if ts is None:
        return (1, datetime.min)
    return (0, ts)


class InMemorySource:
    """
    Source over records held in memory (snapshot files, tests).

    Args:
        entries: Journal entry rows, any status
        lines: Journal entry line rows
        accounts: Account rows, active or not
        agency_column: Whether the accounts store has an agency column; when
            False a scoped fetch raises MissingScopeColumnError
    """

    def __init__(
        self,
        entries: Iterable[Row] = (),
        lines: Iterable[Row] = (),
        accounts: Iterable[Row] = (),
        agency_column: bool = True,
    ):
        self._entries = coerce_entries(entries)
        self._lines = coerce_lines(lines)
        self._accounts = coerce_accounts(accounts)
        self.agency_column = agency_column

    def supports_agency_scope(self) -> bool:
        return self.agency_column

    def fetch_posted_entries(self, limit: Optional[int] = None) -> list[JournalEntry]:
        posted = [e for e in self._entries if e.is_posted]
        # Newest first; undated entries first, as with NULLS FIRST on DESC
        ordered = sorted(posted, key=_entry_sort_key, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    def fetch_entry_lines(self, entry_ids: Sequence[str]) -> list[JournalEntryLine]:
        wanted = set(entry_ids)
        return [line for line in self._lines if line.journal_entry_id in wanted]

    def fetch_accounts(self, agency_id: Optional[str] = None) -> list[Account]:
        if agency_id and not self.agency_column:
            raise MissingScopeColumnError()
        accounts = [a for a in self._accounts if a.is_active]
        if agency_id:
            accounts = [a for a in accounts if a.agency_id == agency_id]
        return sorted(
            accounts, key=lambda a: (a.account_code is None, a.account_code or "")
        )

    def __repr__(self) -> str:
        return (
            f"InMemorySource(entries={len(self._entries)}, lines={len(self._lines)}, "
            f"accounts={len(self._accounts)})"
        )


class SqlLedgerSource:
    """
    Source reading the ledger tables through SQLAlchemy.

    Tables are reflected on first use, so any schema with the expected
    column names works (PostgreSQL, SQLite, ...).

    **Example Usage:**
        ```python
        from ledgerview.core.sources import SqlLedgerSource
        from ledgerview.core.engine import LedgerConfig, load_ledger

        source = SqlLedgerSource("postgresql+psycopg://ledger@db/erp")
        result = load_ledger(source, LedgerConfig(agency_id="a-1"))
        ```
    """

    def __init__(
        self,
        bind: Union[str, Engine],
        entries_table: str = ENTRIES,
        lines_table: str = LINES,
        accounts_table: str = ACCOUNTS,
    ):
        self.engine = create_engine(bind) if isinstance(bind, str) else bind
        self.entries_table = entries_table
        self.lines_table = lines_table
        self.accounts_table = accounts_table
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def _table(self, name: str) -> Table:
        if name not in self._tables:
            self._tables[name] = Table(name, self._metadata, autoload_with=self.engine)
        return self._tables[name]

    def _rows(self, stmt) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt)]

    def supports_agency_scope(self) -> bool:
        columns = inspect(self.engine).get_columns(self.accounts_table)
        return any(col["name"] == SCOPE_COLUMN for col in columns)

    def fetch_posted_entries(self, limit: Optional[int] = None) -> list[dict[str, Any]]:
        t = self._table(self.entries_table)
        stmt = select(t).where(t.c.status == "posted").order_by(t.c.entry_date.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._rows(stmt)

    def fetch_entry_lines(self, entry_ids: Sequence[str]) -> list[dict[str, Any]]:
        if not entry_ids:
            return []
        t = self._table(self.lines_table)
        return self._rows(select(t).where(t.c.journal_entry_id.in_(list(entry_ids))))

    def fetch_accounts(self, agency_id: Optional[str] = None) -> list[dict[str, Any]]:
        t = self._table(self.accounts_table)
        stmt = select(t).where(t.c.is_active == true())
        if agency_id:
            if SCOPE_COLUMN not in t.c:
                raise MissingScopeColumnError()
            stmt = stmt.where(t.c[SCOPE_COLUMN] == agency_id)
        if "account_code" in t.c:
            stmt = stmt.order_by(t.c.account_code.asc())
        return self._rows(stmt)

    def __repr__(self) -> str:
        return f"SqlLedgerSource({self.engine.url!r})"
