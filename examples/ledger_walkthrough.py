#!/usr/bin/env python3
"""
Ledger Walkthrough Example

This example loads the bundled snapshot and shows what the engine derives
from it:
- Per-account balances under double-entry sign conventions
- The transaction feed, newest first, with running balances
- The current-month summary
- pandas views and the CSV export
"""

from datetime import date
from pathlib import Path

from ledgerview import load_ledger, load_snapshot
from ledgerview.export import export_ledger_csv
from ledgerview.frames import monthly_totals, transactions_frame

SNAPSHOT = Path(__file__).with_name("ledger_snapshot.yaml")


def main():
    """Walk through a ledger computation."""
    print("=== LedgerView Walkthrough ===\n")

    snapshot = load_snapshot(SNAPSHOT)
    result = load_ledger(snapshot.to_source(), snapshot.config, now=date(2026, 1, 20))

    print("Account balances:")
    for row in result.account_balances():
        print(f"  {row.account_code:<6} {row.name:<14} {row.balance:>12}")

    summary = result.summary
    print(f"\nTotal Balance:    {summary.total_balance}")
    print(f"Monthly Income:   {summary.monthly_income}")
    print(f"Monthly Expenses: {summary.monthly_expenses}")
    print(f"Net Profit:       {summary.net_profit}")

    print("\nTransactions (newest first):")
    print(transactions_frame(result.feed)[["date", "reference", "type", "amount"]])

    print("\nMonthly totals:")
    print(monthly_totals(result.feed))

    print("\nCSV export:")
    print(export_ledger_csv(result.feed))


if __name__ == "__main__":
    main()
