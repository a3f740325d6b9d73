"""
Tests for loading ledger snapshots from YAML/JSON files and mappings.
"""

import json
from decimal import Decimal

import pytest
import yaml
from ledgerview.core.engine import LedgerConfig, load_ledger
from ledgerview.core.errors import SnapshotError
from ledgerview.core.snapshot_loader import load_snapshot

SNAPSHOT = {
    "settings": {"agency_id": "a1", "entry_limit": 50},
    "accounts": [
        {"id": "cash", "account_type": "asset", "account_name": "Cash"},
        {"id": "sales", "account_type": "revenue", "name": "Sales"},
    ],
    "entries": [
        {"id": "e1", "entry_date": "2026-10-02", "status": "posted"},
    ],
    "lines": [
        {
            "id": "l1",
            "journal_entry_id": "e1",
            "account_id": "cash",
            "debit_amount": 100,
            "credit_amount": 0,
        },
        {
            "id": "l2",
            "journal_entry_id": "e1",
            "account_id": "sales",
            "debit_amount": "0",
            "credit_amount": "100.00",
        },
    ],
}


class TestLoadSnapshot:
    def test_from_mapping(self):
        snapshot = load_snapshot(SNAPSHOT)

        assert snapshot.source == "<mapping>"
        assert snapshot.config == LedgerConfig(agency_id="a1", entry_limit=50)
        assert snapshot.agency_column is True
        assert [a.name for a in snapshot.accounts] == ["Cash", "Sales"]
        assert snapshot.lines[0].debit_amount == Decimal("100")
        assert snapshot.lines[1].credit_amount == Decimal("100.00")

    def test_mapping_not_mutated(self):
        data = json.loads(json.dumps(SNAPSHOT))
        data["settings"]["agency_column"] = False
        load_snapshot(data)
        assert data["settings"]["agency_column"] is False

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text(yaml.safe_dump(SNAPSHOT), encoding="utf-8")

        snapshot = load_snapshot(path)
        assert snapshot.source == str(path)
        assert len(snapshot.entries) == 1

    def test_yaml_dates(self, tmp_path):
        """Unquoted YAML dates arrive as date objects and still parse."""
        path = tmp_path / "ledger.yml"
        path.write_text(
            "entries:\n  - {id: e1, entry_date: 2026-10-02, status: posted}\n"
            "lines:\n  - {id: l1, journal_entry_id: e1, account_id: cash, "
            "debit_amount: 5}\n"
            "accounts:\n  - {id: cash, account_type: asset}\n",
            encoding="utf-8",
        )

        snapshot = load_snapshot(path)
        result = load_ledger(snapshot.to_source(), snapshot.config)
        assert result.feed[0].timestamp.day == 2
        assert result.balances == {"cash": Decimal("5")}

    def test_json_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")

        assert len(load_snapshot(path).lines) == 2

    def test_explicit_format(self, tmp_path):
        path = tmp_path / "ledger.txt"
        path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")

        assert len(load_snapshot(path, format="json").accounts) == 2
        with pytest.raises(SnapshotError, match="Unsupported"):
            load_snapshot(path)

    def test_empty_sections(self):
        snapshot = load_snapshot({})
        assert snapshot.entries == []
        assert snapshot.config == LedgerConfig()

    def test_to_source_round_trip(self):
        snapshot = load_snapshot(SNAPSHOT)
        result = load_ledger(snapshot.to_source(), snapshot.config)
        assert result.summary.total_balance == Decimal("100")


class TestSnapshotErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.yaml")

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("entries: [unclosed", encoding="utf-8")
        with pytest.raises(SnapshotError, match="Could not parse"):
            load_snapshot(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(SnapshotError, match="root must be a mapping"):
            load_snapshot(path)

    def test_section_must_be_list(self):
        with pytest.raises(SnapshotError, match="entries: expected a list"):
            load_snapshot({"entries": {"id": "e1"}})

    def test_row_must_be_mapping(self):
        with pytest.raises(SnapshotError, match=r"accounts\[0\]"):
            load_snapshot({"accounts": ["cash"]})

    def test_bad_amount_names_row(self):
        data = {"lines": [{"id": "l1", "journal_entry_id": "e1", "debit_amount": "x"}]}
        with pytest.raises(SnapshotError, match=r"lines\[0\].*debit_amount"):
            load_snapshot(data)

    def test_missing_id(self):
        with pytest.raises(SnapshotError, match="missing 'id'"):
            load_snapshot({"entries": [{"status": "posted"}]})

    def test_agency_column_must_be_bool(self):
        with pytest.raises(SnapshotError, match="agency_column"):
            load_snapshot({"settings": {"agency_column": "no"}})

    def test_bad_limit(self):
        with pytest.raises(SnapshotError, match="entry_limit"):
            load_snapshot({"settings": {"entry_limit": 0}})
