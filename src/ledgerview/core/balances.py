"""
Per-account balances from posted journal lines.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .accounts import AccountRegistry, AccountType
from .currency import ZERO
from .models import JournalEntryLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountBalance:
    """Signed balance of one account, with its normalized type."""

    account_id: str
    account_type: AccountType
    balance: Decimal
    name: Optional[str] = None
    account_code: Optional[str] = None


def signed_amount(line: JournalEntryLine, account_type: AccountType) -> Decimal:
    """
    Contribution of a line to its account balance.

    For asset and expense accounts: debit - credit
    For every other type: credit - debit
    """
    if account_type.is_debit_normal:
        return line.debit_amount - line.credit_amount
    return line.credit_amount - line.debit_amount


def accumulate_balances(
    lines: Iterable[JournalEntryLine], registry: AccountRegistry
) -> dict[str, Decimal]:
    """
    Fold journal lines into per-account signed balances.

    Lines without an account id, or whose account is not in the registry,
    contribute nothing. Decimal addition is exact, so the result does not
    depend on line order.

    Args:
        lines: Lines of posted entries
        registry: Active accounts

    Returns:
        Dictionary of account_id -> balance, in first-seen order
    """
    balances: dict[str, Decimal] = {}
    skipped = 0

    for line in lines:
        if not line.account_id:
            skipped += 1
            continue
        account = registry.get_account(line.account_id)
        if account is None:
            skipped += 1
            continue

        account_type = AccountType.parse(account.account_type)
        balances[line.account_id] = balances.get(line.account_id, ZERO) + signed_amount(
            line, account_type
        )

    if skipped:
        logger.debug("Skipped %d line(s) with unresolved accounts", skipped)
    return balances


def total_balance(
    balances: Mapping[str, Decimal], registry: AccountRegistry
) -> Decimal:
    """
    Total asset position: the sum of balances over asset accounts only.

    Expense balances share the asset sign rule but are excluded here.
    """
    total = ZERO
    for account_id, balance in balances.items():
        if registry.type_of(account_id) is AccountType.ASSET:
            total += balance
    return total


def account_balances(
    balances: Mapping[str, Decimal], registry: AccountRegistry
) -> list[AccountBalance]:
    """Expand a balance mapping into AccountBalance rows, in mapping order."""
    rows = []
    for account_id, balance in balances.items():
        account = registry.get_account(account_id)
        rows.append(
            AccountBalance(
                account_id=account_id,
                account_type=registry.type_of(account_id),
                balance=balance,
                name=account.name if account else None,
                account_code=account.account_code if account else None,
            )
        )
    return rows
