"""Utilities for loading ledger snapshots from YAML/JSON sources."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .engine import LedgerConfig
from .errors import LedgerDataError, SnapshotError
from .models import Account, JournalEntry, JournalEntryLine
from .sources import InMemorySource

__all__ = [
    "SnapshotError",
    "LedgerSnapshot",
    "load_snapshot",
]


@dataclass(slots=True)
class LedgerSnapshot:
    """Structured representation of a ledger snapshot file."""

    entries: list[JournalEntry]
    lines: list[JournalEntryLine]
    accounts: list[Account]
    config: LedgerConfig = field(default_factory=LedgerConfig)
    agency_column: bool = True
    source: str = "<memory>"

    def to_source(self) -> InMemorySource:
        """Wrap the snapshot records in an in-memory ledger source."""
        return InMemorySource(
            entries=self.entries,
            lines=self.lines,
            accounts=self.accounts,
            agency_column=self.agency_column,
        )


def load_snapshot(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> LedgerSnapshot:
    """
    Parse a ledger snapshot from YAML/JSON/dict.

    Expected layout::

        settings:              # optional
          agency_id: agency-1
          entry_limit: 500
          agency_column: true  # false: accounts store has no agency column
        entries: [...]
        lines: [...]
        accounts: [...]
    """
    mapping, label = _read_source(source, format=format)
    settings = _ensure_dict(mapping.get("settings"), f"{label}::settings")
    agency_column = settings.pop("agency_column", True)
    if not isinstance(agency_column, bool):
        raise SnapshotError(f"{label}::settings.agency_column must be boolean")

    return LedgerSnapshot(
        entries=_normalize(mapping.get("entries"), JournalEntry, f"{label}::entries"),
        lines=_normalize(mapping.get("lines"), JournalEntryLine, f"{label}::lines"),
        accounts=_normalize(mapping.get("accounts"), Account, f"{label}::accounts"),
        config=LedgerConfig.from_mapping(settings),
        agency_column=agency_column,
        source=label,
    )


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise SnapshotError(f"Unsupported snapshot format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise SnapshotError(f"Could not parse snapshot {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot root must be a mapping (source={path})")
    return data, str(path)


def _normalize(raw: Any, record_type, ctx: str) -> list:
    rows = _ensure_list(raw, ctx)
    records = []
    for idx, row in enumerate(rows):
        row_ctx = f"{ctx}[{idx}]"
        data = _ensure_dict(row, row_ctx)
        try:
            records.append(record_type.from_record(data))
        except LedgerDataError as exc:
            raise SnapshotError(f"{row_ctx}: {exc}") from exc
    return records


def _ensure_dict(value: Any, ctx: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SnapshotError(f"{ctx}: expected a mapping")
    return deepcopy(value)


def _ensure_list(value: Any, ctx: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotError(f"{ctx}: expected a list")
    return list(value)
