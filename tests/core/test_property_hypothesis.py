"""
Property-based tests for the ledger engine using Hypothesis.

These tests check properties that must hold for any snapshot:
balance order independence, determinism and the asset-only total.
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from ledgerview.core.accounts import AccountRegistry, AccountType
from ledgerview.core.balances import accumulate_balances
from ledgerview.core.engine import compute
from ledgerview.core.models import Account, JournalEntry, JournalEntryLine

ACCOUNTS = [
    Account("cash", "asset"),
    Account("bank", "asset"),
    Account("loan", "liability"),
    Account("sales", "revenue"),
    Account("rent", "expense"),
]
ACCOUNT_IDS = [a.id for a in ACCOUNTS] + ["ghost"]
NOW = date(2026, 10, 19)

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@st.composite
def ledgers(draw):
    n_entries = draw(st.integers(min_value=0, max_value=8))
    entries = [
        JournalEntry(
            id=f"e{i}",
            entry_date=draw(
                st.one_of(
                    st.none(),
                    st.integers(min_value=-60, max_value=0).map(
                        lambda d: (NOW + timedelta(days=d)).isoformat()
                    ),
                )
            ),
        )
        for i in range(n_entries)
    ]
    lines = []
    for i, entry in enumerate(entries):
        for j in range(draw(st.integers(min_value=0, max_value=4))):
            lines.append(
                JournalEntryLine(
                    id=f"l{i}-{j}",
                    journal_entry_id=entry.id,
                    account_id=draw(st.sampled_from(ACCOUNT_IDS)),
                    debit_amount=draw(amounts),
                    credit_amount=draw(amounts),
                )
            )
    return entries, lines


class TestBalanceProperties:
    @given(data=st.data(), ledger=ledgers())
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_balances_independent_of_line_order(self, data, ledger):
        _, lines = ledger
        registry = AccountRegistry(ACCOUNTS)
        shuffled = data.draw(st.permutations(lines))

        assert accumulate_balances(lines, registry) == accumulate_balances(
            shuffled, registry
        )

    @given(ledger=ledgers())
    @settings(max_examples=100)
    def test_total_is_sum_of_asset_balances(self, ledger):
        entries, lines = ledger
        result = compute(entries, lines, ACCOUNTS, NOW)

        registry = AccountRegistry(ACCOUNTS)
        expected = sum(
            (
                balance
                for account_id, balance in result.balances.items()
                if registry.type_of(account_id) is AccountType.ASSET
            ),
            Decimal("0"),
        )
        assert result.summary.total_balance == expected
        assert "ghost" not in result.balances


class TestComputeProperties:
    @given(ledger=ledgers())
    @settings(max_examples=100)
    def test_deterministic(self, ledger):
        entries, lines = ledger

        first = compute(entries, lines, ACCOUNTS, NOW)
        second = compute(entries, lines, ACCOUNTS, NOW)

        assert first == second
        assert repr(first.feed) == repr(second.feed)

    @given(ledger=ledgers())
    @settings(max_examples=100)
    def test_feed_covers_every_positive_line(self, ledger):
        entries, lines = ledger
        result = compute(entries, lines, ACCOUNTS, NOW)

        positive = {
            line.id
            for line in lines
            if line.credit_amount > 0 or line.debit_amount > 0
        }
        assert {t.id for t in result.feed} == positive
        assert all(t.amount > 0 for t in result.feed)

    @given(ledger=ledgers())
    @settings(max_examples=100)
    def test_net_is_income_minus_expenses(self, ledger):
        entries, lines = ledger
        summary = compute(entries, lines, ACCOUNTS, NOW).summary

        assert summary.net_profit == summary.monthly_income - summary.monthly_expenses
        assert summary.monthly_income >= 0
        assert summary.monthly_expenses >= 0
