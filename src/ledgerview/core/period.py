"""
Current-period income and expense summary.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from .currency import ZERO
from .feed import Transaction, TransactionType
from .utils import coerce_datetime, month_of


@dataclass(frozen=True)
class LedgerSummary:
    """
    Headline ledger figures.

    Attributes:
        total_balance: Lifetime sum of asset account balances
        monthly_income: Credits dated in the current calendar month
        monthly_expenses: Debits dated in the current calendar month
        net_profit: monthly_income - monthly_expenses
    """

    total_balance: Decimal = ZERO
    monthly_income: Decimal = ZERO
    monthly_expenses: Decimal = ZERO
    net_profit: Decimal = ZERO

    def as_dict(self) -> dict[str, str]:
        """Decimal-as-string mapping, keyed the way the dashboard names them."""
        return {
            "totalBalance": str(self.total_balance),
            "monthlyIncome": str(self.monthly_income),
            "monthlyExpenses": str(self.monthly_expenses),
            "netProfit": str(self.net_profit),
        }


@dataclass(frozen=True)
class PeriodTotals:
    """Income/expense totals for one calendar month."""

    income: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


def in_current_month(txn: Transaction, now: date | datetime) -> bool:
    """
    True when the transaction's date falls in the same calendar month as ``now``.

    Both sides are compared as naive UTC, so an aware ``now`` in any timezone
    matches transactions stamped at the same instant.
    """
    ts = txn.timestamp
    if ts is None:
        return False
    return month_of(ts) == month_of(coerce_datetime(now))


def summarize_period(
    feed: Iterable[Transaction], now: Optional[date | datetime] = None
) -> PeriodTotals:
    """
    Sum credits and debits dated in the calendar month of ``now``.

    Args:
        feed: Transactions in any order
        now: Reference date; the wall clock at call time when omitted

    Returns:
        PeriodTotals for that month
    """
    reference = coerce_datetime(datetime.now() if now is None else now)

    income = ZERO
    expenses = ZERO
    for txn in feed:
        if not in_current_month(txn, reference):
            continue
        if txn.type is TransactionType.CREDIT:
            income += txn.amount
        else:
            expenses += txn.amount
    return PeriodTotals(income=income, expenses=expenses)


def build_summary(total_balance: Decimal, period: PeriodTotals) -> LedgerSummary:
    """Combine the lifetime asset total with the current-month totals."""
    return LedgerSummary(
        total_balance=total_balance,
        monthly_income=period.income,
        monthly_expenses=period.expenses,
        net_profit=period.net,
    )
