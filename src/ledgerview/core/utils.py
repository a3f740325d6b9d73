"""
Date helpers shared by the feed, period and export modules.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import numpy as np
import pandas as pd


def coerce_datetime(value: Any) -> datetime | None:
    """
    Parse a stored date value into a naive datetime.

    Accepts: None | str | date | datetime | np.datetime64
    Strings are parsed as ISO 8601 by pandas. Returns None when the value is
    missing or cannot be parsed. Aware values are converted to UTC before the
    tzinfo is dropped so that mixed inputs stay comparable.
    """
    if value is None:
        return None
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        value = value.astype("datetime64[us]").item()
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # ISO 8601 incl. PostgreSQL text output ('2026-10-02 10:00:00.12345+00')
        stamp = pd.to_datetime(text, utc=True, errors="coerce", format="ISO8601")
        if pd.isna(stamp):
            return None
        return stamp.tz_convert(None).to_pydatetime()
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def coerce_date(value: Any) -> date | None:
    """Parse a stored date value into a calendar date (None if unparseable)."""
    parsed = coerce_datetime(value)
    return parsed.date() if parsed is not None else None


def month_of(value: date | datetime) -> np.datetime64:
    """Normalize a date to month-precision numpy datetime64."""
    if isinstance(value, datetime):
        value = value.date()
    return np.datetime64(value, "M")
