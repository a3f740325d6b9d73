"""
General ledger reconstruction.

``compute`` is the pure core: given a snapshot of entries, lines and accounts
it derives per-account balances, the display-ordered transaction feed and the
headline summary. It holds no state between calls and performs no I/O, so it
can run concurrently on independent snapshots and returns equal results for
equal input.

``load_ledger`` wraps it with the reads: it fetches the snapshot from a
``LedgerSource``, applies agency scoping and hands the records to ``compute``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, TypeVar

from .accounts import AccountRegistry
from .balances import (
    AccountBalance,
    account_balances,
    accumulate_balances,
    total_balance,
)
from .errors import (
    LedgerError,
    LedgerFetchError,
    SnapshotError,
    is_missing_scope_column,
)
from .feed import Transaction, build_feed, sort_for_display
from .models import JournalEntry, coerce_accounts, coerce_entries, coerce_lines
from .period import LedgerSummary, build_summary, summarize_period
from .sources import (
    ACCOUNTS,
    ENTRIES,
    LINES,
    LedgerSource,
    probe_capabilities,
    warn_unscoped_fallback,
)

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_LIMIT = 500

T = TypeVar("T")


@dataclass
class LedgerConfig:
    """
    Settings for a ledger load.

    Attributes:
        agency_id: Tenant to scope entries and accounts to (None for all)
        entry_limit: Maximum number of most recent posted entries to read;
            figures are computed over that window only
    """

    agency_id: Optional[str] = None
    entry_limit: Optional[int] = DEFAULT_ENTRY_LIMIT

    def __post_init__(self):
        if self.entry_limit is not None and self.entry_limit < 1:
            raise ValueError(f"entry_limit must be >= 1, got {self.entry_limit}")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> LedgerConfig:
        """Build a config from a ``settings`` mapping; unknown keys are ignored."""
        data = data or {}
        agency_id = data.get("agency_id")
        limit = data.get("entry_limit", DEFAULT_ENTRY_LIMIT)
        bad_type = isinstance(limit, bool) or not isinstance(limit, int)
        if limit is not None and bad_type:
            raise SnapshotError(
                f"settings.entry_limit must be an integer, got {limit!r}"
            )
        try:
            return cls(
                agency_id=str(agency_id) if agency_id is not None else None,
                entry_limit=limit,
            )
        except ValueError as exc:
            raise SnapshotError(f"settings: {exc}") from exc


@dataclass(frozen=True)
class LedgerResult:
    """
    Output of one ledger computation.

    Unpacks as ``balances, feed, summary``.

    Attributes:
        balances: account_id -> signed balance
        feed: Transactions in display order (newest first)
        summary: Headline figures
        registry: Accounts the balances were resolved against
    """

    balances: dict[str, Decimal]
    feed: list[Transaction]
    summary: LedgerSummary
    registry: AccountRegistry = field(default_factory=AccountRegistry, compare=False)

    def __iter__(self) -> Iterator[Any]:
        return iter((self.balances, self.feed, self.summary))

    def account_balances(self) -> list[AccountBalance]:
        """Balances as rows with account type and name."""
        return account_balances(self.balances, self.registry)


def compute(
    entries: Iterable[Any],
    lines: Iterable[Any],
    accounts: Iterable[Any],
    now: Optional[date | datetime] = None,
) -> LedgerResult:
    """
    Derive balances, feed and summary from a ledger snapshot.

    Only posted entries are considered, and only lines belonging to them.
    Balances and the running balance are accumulated in the order entries and
    lines are given; the feed is sorted for display afterwards without
    touching the attached balances.

    Args:
        entries: Journal entries (records or raw rows), in fetch order
        lines: Journal entry lines (records or raw rows), in fetch order
        accounts: Chart-of-accounts records (records or raw rows)
        now: Reference date for the monthly window; wall clock when omitted

    Returns:
        LedgerResult
    """
    posted = [e for e in coerce_entries(entries) if e.is_posted]
    entry_ids = {e.id for e in posted}
    posted_lines = [
        line for line in coerce_lines(lines) if line.journal_entry_id in entry_ids
    ]
    registry = AccountRegistry(coerce_accounts(accounts))

    balances = accumulate_balances(posted_lines, registry)
    total = total_balance(balances, registry)

    feed = sort_for_display(build_feed(posted, posted_lines, registry))
    summary = build_summary(total, summarize_period(feed, now))

    return LedgerResult(
        balances=balances, feed=feed, summary=summary, registry=registry
    )


def scope_entries(
    entries: Iterable[JournalEntry], agency_id: Optional[str]
) -> list[JournalEntry]:
    """Keep entries of the agency plus entries that carry no agency."""
    return [
        e
        for e in entries
        if not agency_id or not e.agency_id or e.agency_id == agency_id
    ]


def _fetch_error(name: str, exc: Exception) -> LedgerFetchError:
    logger.error("Error fetching %s: %s", name, exc)
    return LedgerFetchError(name, str(exc) or type(exc).__name__)


def _fetch(name: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except LedgerError:
        raise
    except Exception as exc:
        raise _fetch_error(name, exc) from exc


def _fetch_accounts(source: LedgerSource, agency_id: Optional[str]) -> Sequence[Any]:
    """
    Fetch active accounts, scoped to ``agency_id`` when given.

    A scoped fetch that fails on the missing agency column is retried
    unscoped, even when the source declared the column present.
    """
    if agency_id:
        try:
            return source.fetch_accounts(agency_id)
        except Exception as exc:
            if not is_missing_scope_column(exc):
                if isinstance(exc, LedgerError):
                    raise
                raise _fetch_error(ACCOUNTS, exc) from exc
            warn_unscoped_fallback()
    return _fetch(ACCOUNTS, source.fetch_accounts, None)


def load_ledger(
    source: LedgerSource,
    config: Optional[LedgerConfig] = None,
    now: Optional[date | datetime] = None,
) -> LedgerResult:
    """
    Fetch a snapshot from ``source`` and compute the ledger over it.

    Raises:
        LedgerFetchError: If any read fails. Nothing is retried; callers
            re-invoke the whole load.
    """
    config = config or LedgerConfig()

    entries = coerce_entries(
        _fetch(ENTRIES, source.fetch_posted_entries, config.entry_limit)
    )
    logger.debug("Fetched %d posted entries", len(entries))
    if config.entry_limit is not None and len(entries) >= config.entry_limit:
        logger.warning(
            "Entry fetch hit the limit of %d; figures cover the most recent only",
            config.entry_limit,
        )
    if not entries:
        return compute([], [], [], now)

    entries = scope_entries(entries, config.agency_id)
    capabilities = probe_capabilities(source, config.agency_id)

    entry_ids = [e.id for e in entries]
    lines = _fetch(LINES, source.fetch_entry_lines, entry_ids) if entry_ids else []
    logger.debug("Fetched %d lines", len(lines))

    scope = config.agency_id if capabilities.accounts_agency_scoped else None
    accounts = _fetch_accounts(source, scope)
    logger.debug("Fetched %d accounts", len(accounts))

    return compute(entries, lines, accounts, now)
