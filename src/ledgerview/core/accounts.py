"""
Account type classification and the chart-of-accounts registry.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Optional

from .models import Account


class AccountType(Enum):
    """Normalized account type."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> AccountType:
        """
        Normalize a free-text account type.

        Matching is case-insensitive on the whole value. Anything that is not
        exactly one of the five types (including variants such as 'income'
        or 'Expenses') is UNKNOWN.
        """
        text = str(raw or "").lower()
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_debit_normal(self) -> bool:
        """Assets and expenses grow with debits; everything else with credits."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class Category(Enum):
    """Display category of a transaction."""

    REVENUE = "Revenue"
    OPERATING_EXPENSES = "Operating Expenses"
    PAYROLL = "Payroll"
    OTHER = "Other"


# Evaluated in order, first match wins.
_CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], Category], ...] = (
    (("revenue", "income"), Category.REVENUE),
    (("expense",), Category.OPERATING_EXPENSES),
    (("payroll", "salary"), Category.PAYROLL),
)


def classify_category(account_type: Optional[str]) -> Category:
    """
    Derive a transaction category from a raw account type string.

    Case-insensitive substring match: revenue/income, then expense, then
    payroll/salary, else OTHER. Missing types are OTHER.
    """
    if not account_type:
        return Category.OTHER
    text = str(account_type).lower()
    for keywords, category in _CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return Category.OTHER


class AccountRegistry:
    """
    Index of active chart-of-accounts records by id.

    **Example Usage:**
        ```python
        from ledgerview.core.accounts import AccountRegistry, AccountType
        from ledgerview.core.models import Account

        registry = AccountRegistry([Account("1000", "Asset", name="Cash")])
        registry.type_of("1000")     # AccountType.ASSET
        registry.type_of("missing")  # AccountType.UNKNOWN
        ```

    Inactive accounts are not indexed. When two records share an id the later
    one wins.
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._accounts: dict[str, Account] = {}
        for account in accounts:
            self.register_account(account)

    def register_account(self, account: Account) -> None:
        """Register an account (ignored when inactive)."""
        if not account.is_active:
            return
        self._accounts[account.id] = account

    def get_account(self, account_id: Optional[str]) -> Optional[Account]:
        """Get account by ID, or None if it is not registered."""
        if account_id is None:
            return None
        return self._accounts.get(account_id)

    def has_account(self, account_id: Optional[str]) -> bool:
        """Check if account exists."""
        return account_id is not None and account_id in self._accounts

    def type_of(self, account_id: Optional[str]) -> AccountType:
        """Normalized type of an account; UNKNOWN for unregistered ids."""
        account = self.get_account(account_id)
        if account is None:
            return AccountType.UNKNOWN
        return AccountType.parse(account.account_type)

    def category_of(self, account_id: Optional[str]) -> Category:
        """Display category of an account; OTHER for unregistered ids."""
        account = self.get_account(account_id)
        if account is None:
            return Category.OTHER
        return classify_category(account.account_type)

    def accounts_of_type(self, account_type: AccountType) -> list[Account]:
        """All registered accounts with the given normalized type."""
        return [
            acc
            for acc in self._accounts.values()
            if AccountType.parse(acc.account_type) is account_type
        ]

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._accounts

    def __repr__(self) -> str:
        return f"AccountRegistry(accounts={len(self._accounts)})"
