"""
Error classes for LedgerView.

This module defines the exception hierarchy used throughout the ledger engine
for fetch failures, malformed records and snapshot loading problems.
"""

from __future__ import annotations

# PostgreSQL SQLSTATE for "undefined column"
UNDEFINED_COLUMN_CODE = "42703"

SCOPE_COLUMN = "agency_id"


class LedgerError(Exception):
    """Base class for all ledger engine errors."""


class LedgerFetchError(LedgerError):
    """
    Raised when a read from the ledger store fails.

    Fetch failures are fatal for the whole batch: the caller is expected to
    surface the message and re-invoke the pipeline when the user retries.

    Attributes:
        source: Name of the record set that failed (e.g. 'journal_entries')
        detail: The unformatted message

    **Example Usage:**
        ```python
        from ledgerview.core.errors import LedgerFetchError

        try:
            result = load_ledger(source)
        except LedgerFetchError as e:
            print(f"Failed to load ledger data: {e}")
        ```
    """

    def __init__(self, source: str, message: str):
        self.source = source
        self.detail = message
        super().__init__(f"[{source}] {message}")


class MissingScopeColumnError(LedgerError):
    """
    Raised by a source when the accounts table has no agency-scoping column.

    This is the one recognized, non-fatal read condition: the pipeline falls
    back to an unscoped accounts fetch.
    """

    def __init__(self, message: str | None = None, code: str = UNDEFINED_COLUMN_CODE):
        self.code = code
        super().__init__(
            message or f'column "{SCOPE_COLUMN}" does not exist on chart_of_accounts'
        )


class LedgerDataError(LedgerError):
    """Raised when a record field cannot be coerced to its expected type."""


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be parsed or validated."""


def is_missing_scope_column(exc: BaseException) -> bool:
    """
    Check whether an exception means the agency-scoping column is missing.

    Matches on the SQLSTATE code when the driver exposes one (``code`` or
    ``pgcode``), otherwise on the column name appearing in the message.
    """
    if isinstance(exc, MissingScopeColumnError):
        return True
    for attr in ("code", "pgcode"):
        if str(getattr(exc, attr, "") or "") == UNDEFINED_COLUMN_CODE:
            return True
    orig = getattr(exc, "orig", None)
    if orig is not None and orig is not exc and is_missing_scope_column(orig):
        return True
    return SCOPE_COLUMN in str(exc)
