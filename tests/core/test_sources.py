"""
Tests for ledger sources: in-memory snapshots and SQL tables via SQLAlchemy.
"""

from datetime import date
from decimal import Decimal

import pytest
from ledgerview.core.engine import LedgerConfig, compute, load_ledger
from ledgerview.core.errors import (
    LedgerFetchError,
    MissingScopeColumnError,
    is_missing_scope_column,
)
from ledgerview.core.models import JournalEntry
from ledgerview.core.sources import (
    InMemorySource,
    LedgerSource,
    SourceCapabilities,
    SqlLedgerSource,
    probe_capabilities,
)
from sqlalchemy import create_engine, text

NOW = date(2026, 10, 19)

ENTRY_ROWS = [
    ("e1", "2026-10-01", "posted", "Opening", "REF-1", None, "a1"),
    ("e2", "2026-10-03", "posted", "Sale", None, "JE-2026-0002", "a1"),
    ("e3", "2026-10-02", "draft", "Pending", None, None, "a1"),
    ("e4", "2026-10-05", "posted", "Rent", None, None, None),
]

LINE_ROWS = [
    ("l1", "e1", "cash", 500.0, 0.0, None),
    ("l2", "e1", "capital", 0.0, 500.0, None),
    ("l3", "e2", "cash", 120.5, 0.0, None),
    ("l4", "e2", "sales", 0.0, 120.5, "Widget"),
    ("l5", "e3", "cash", 1000.0, 0.0, None),
    ("l6", "e4", "rent", 80.0, 0.0, None),
    ("l7", "e4", "cash", 0.0, 80.0, None),
]

ACCOUNT_ROWS = [
    ("cash", "1000", "Cash", "asset", 1, "a1"),
    ("capital", "3000", "Owner Capital", "equity", 1, "a1"),
    ("sales", "4000", "Sales", "revenue", 1, "a1"),
    ("rent", "6000", "Rent", "expense", 1, "a2"),
    ("legacy", "0999", "Legacy", "asset", 0, "a1"),
]


def _db_path(tmp_path, agency_column=True):
    return tmp_path / ("ledger.db" if agency_column else "ledger_global.db")


def _make_engine(tmp_path, agency_column=True):
    engine = create_engine(f"sqlite:///{_db_path(tmp_path, agency_column)}")
    scope = ", agency_id TEXT" if agency_column else ""
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE journal_entries (id TEXT PRIMARY KEY, entry_date TEXT, "
                "status TEXT, description TEXT, reference TEXT, entry_number TEXT, "
                "agency_id TEXT, created_at TEXT)"
            )
        )
        conn.execute(
            text(
                "CREATE TABLE journal_entry_lines (id TEXT PRIMARY KEY, "
                "journal_entry_id TEXT, account_id TEXT, debit_amount REAL, "
                "credit_amount REAL, description TEXT)"
            )
        )
        conn.execute(
            text(
                "CREATE TABLE chart_of_accounts (id TEXT PRIMARY KEY, "
                "account_code TEXT, account_name TEXT, account_type TEXT, "
                f"is_active BOOLEAN{scope})"
            )
        )
        for row in ENTRY_ROWS:
            conn.execute(
                text(
                    "INSERT INTO journal_entries (id, entry_date, status, "
                    "description, reference, entry_number, agency_id) "
                    "VALUES (:id, :d, :s, :desc, :ref, :num, :agency)"
                ),
                dict(zip(["id", "d", "s", "desc", "ref", "num", "agency"], row)),
            )
        for row in LINE_ROWS:
            conn.execute(
                text(
                    "INSERT INTO journal_entry_lines VALUES "
                    "(:id, :entry, :account, :debit, :credit, :desc)"
                ),
                dict(
                    zip(["id", "entry", "account", "debit", "credit", "desc"], row)
                ),
            )
        for row in ACCOUNT_ROWS:
            params = dict(
                zip(["id", "code", "name", "type", "active", "agency"], row)
            )
            if agency_column:
                stmt = "(:id, :code, :name, :type, :active, :agency)"
            else:
                stmt = "(:id, :code, :name, :type, :active)"
                params.pop("agency")
            conn.execute(
                text(f"INSERT INTO chart_of_accounts VALUES {stmt}"), params
            )
    return engine


class TestSqlLedgerSource:
    """SQLAlchemy-backed source over a SQLite database."""

    def test_is_a_ledger_source(self, tmp_path):
        assert isinstance(SqlLedgerSource(_make_engine(tmp_path)), LedgerSource)

    def test_posted_entries_newest_first(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path))

        rows = source.fetch_posted_entries()
        assert [r["id"] for r in rows] == ["e4", "e2", "e1"]
        assert [r["id"] for r in source.fetch_posted_entries(limit=2)] == [
            "e4",
            "e2",
        ]

    def test_entry_lines(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path))

        rows = source.fetch_entry_lines(["e1", "e4"])
        assert sorted(r["id"] for r in rows) == ["l1", "l2", "l6", "l7"]
        assert source.fetch_entry_lines([]) == []

    def test_accounts_active_only(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path))

        ids = [r["id"] for r in source.fetch_accounts()]
        assert ids == ["cash", "capital", "sales", "rent"]
        assert [r["id"] for r in source.fetch_accounts("a2")] == ["rent"]

    def test_capability_from_schema(self, tmp_path):
        assert SqlLedgerSource(_make_engine(tmp_path)).supports_agency_scope()

        unscoped = SqlLedgerSource(_make_engine(tmp_path, agency_column=False))
        assert not unscoped.supports_agency_scope()
        with pytest.raises(MissingScopeColumnError):
            unscoped.fetch_accounts("a1")

    def test_load_ledger_matches_compute(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path))

        result = load_ledger(source, LedgerConfig(), now=NOW)
        expected = compute(
            source.fetch_posted_entries(500),
            source.fetch_entry_lines(["e4", "e2", "e1"]),
            source.fetch_accounts(),
            NOW,
        )

        assert result == expected
        assert result.balances["cash"] == Decimal("540.5")
        assert result.summary.total_balance == Decimal("540.5")
        assert [t.id for t in result.feed][:2] == ["l6", "l7"]

    def test_scoped_load(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path))

        result = load_ledger(source, LedgerConfig(agency_id="a1"), now=NOW)

        # rent belongs to a2, so its line is not resolved
        assert "rent" not in result.balances
        assert result.balances["cash"] == Decimal("540.5")

    def test_unscoped_schema_falls_back(self, tmp_path):
        source = SqlLedgerSource(_make_engine(tmp_path, agency_column=False))

        result = load_ledger(source, LedgerConfig(agency_id="a1"), now=NOW)
        assert result.balances["rent"] == Decimal("80.0")

    def test_missing_table_is_fetch_error(self, tmp_path):
        source = SqlLedgerSource(
            _make_engine(tmp_path), entries_table="no_such_table"
        )
        with pytest.raises(LedgerFetchError) as excinfo:
            load_ledger(source, now=NOW)
        assert excinfo.value.source == "journal_entries"

    def test_url_bind(self, tmp_path):
        _make_engine(tmp_path)
        source = SqlLedgerSource(f"sqlite:///{_db_path(tmp_path)}")
        assert len(source.fetch_posted_entries()) == 3


class TestInMemorySource:
    """Snapshot-backed source."""

    def test_undated_entries_first(self):
        source = InMemorySource(
            entries=[
                {"id": "e1", "entry_date": "2026-10-01", "status": "posted"},
                {"id": "e2", "entry_date": None, "status": "posted"},
                {"id": "e3", "entry_date": "2026-10-09", "status": "posted"},
                {"id": "e4", "entry_date": "2026-10-10", "status": "void"},
            ]
        )

        assert [e.id for e in source.fetch_posted_entries()] == ["e2", "e3", "e1"]
        assert [e.id for e in source.fetch_posted_entries(1)] == ["e2"]

    def test_accounts_ordered_by_code(self):
        source = InMemorySource(
            accounts=[
                {"id": "b", "account_code": "2000", "account_type": "liability"},
                {"id": "n", "account_type": "asset"},
                {"id": "a", "account_code": "1000", "account_type": "asset"},
            ]
        )
        assert [a.id for a in source.fetch_accounts()] == ["a", "b", "n"]

    def test_scoped_fetch_without_column(self):
        source = InMemorySource(agency_column=False)
        assert source.fetch_accounts() == []
        with pytest.raises(MissingScopeColumnError):
            source.fetch_accounts("a1")

    def test_accepts_records(self):
        source = InMemorySource(entries=[JournalEntry("e1", "2026-10-01")])
        assert source.fetch_posted_entries()[0].id == "e1"


class TestProbeCapabilities:
    def test_no_agency_means_unscoped(self):
        caps = probe_capabilities(InMemorySource(), None)
        assert caps == SourceCapabilities(accounts_agency_scoped=False)

    def test_declared_capability(self):
        assert probe_capabilities(InMemorySource(), "a1").accounts_agency_scoped
        unscoped = InMemorySource(agency_column=False)
        assert not probe_capabilities(unscoped, "a1").accounts_agency_scoped


class TestMissingColumnDetection:
    class _DriverError(Exception):
        def __init__(self, message, code=None):
            super().__init__(message)
            self.code = code

    class _Wrapped(Exception):
        def __init__(self, orig):
            super().__init__("statement failed")
            self.orig = orig

    def test_by_code(self):
        assert is_missing_scope_column(self._DriverError("boom", code="42703"))

    def test_by_message(self):
        exc = RuntimeError('column "agency_id" does not exist')
        assert is_missing_scope_column(exc)

    def test_wrapped_driver_error(self):
        exc = self._Wrapped(self._DriverError("boom", code="42703"))
        assert is_missing_scope_column(exc)

    def test_other_errors(self):
        assert not is_missing_scope_column(RuntimeError("timeout"))
        assert not is_missing_scope_column(self._DriverError("x", code="08006"))
