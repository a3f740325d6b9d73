"""
Decimal handling for ledger amounts.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from .errors import LedgerDataError

ZERO = Decimal("0")


class RoundingPolicy(Enum):
    """Rounding policies for display quantization."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce a stored amount to Decimal.

    Missing values (None, empty string) count as zero. Floats go through
    ``str`` so that 0.1 becomes Decimal('0.1') rather than its binary expansion.

    Raises:
        LedgerDataError: If the value is not numeric
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise LedgerDataError(f"{field}: expected a number, got {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise LedgerDataError(f"{field}: expected a number, got {value!r}") from exc
    else:
        raise LedgerDataError(f"{field}: expected a number, got {value!r}")
    if not result.is_finite():
        raise LedgerDataError(f"{field}: expected a finite number, got {value!r}")
    return result


def quantize(
    amount: Decimal,
    decimals: int = 2,
    rounding: RoundingPolicy = RoundingPolicy.HALF_UP,
) -> Decimal:
    """Quantize amount to the given number of decimal places."""
    quantum = Decimal("1").scaleb(-decimals)  # e.g., 0.01 for 2 dp
    return amount.quantize(quantum, rounding=rounding.value)


def format_amount(amount: Decimal | int | float | str | None) -> str:
    """Format an amount with exactly two decimals (e.g. '1234.50', '-3.00')."""
    value = quantize(to_decimal(amount))
    if value == 0:
        value = abs(value)  # no '-0.00'
    return f"{value:.2f}"
