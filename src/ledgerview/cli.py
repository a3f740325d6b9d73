"""
Command-line interface for LedgerView.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal

from ledgerview.core.currency import format_amount
from ledgerview.core.engine import LedgerConfig, LedgerResult, load_ledger
from ledgerview.core.errors import LedgerError
from ledgerview.core.feed import filter_transactions, transactions_of_type
from ledgerview.core.snapshot_loader import load_snapshot
from ledgerview.export import export_ledger_csv, format_date

EXAMPLE_SNAPSHOT = {
    "settings": {"agency_id": "agency-1", "entry_limit": 500, "agency_column": True},
    "accounts": [
        {
            "id": "acc-cash",
            "account_code": "1000",
            "account_name": "Cash",
            "account_type": "asset",
            "is_active": True,
            "agency_id": "agency-1",
        },
        {
            "id": "acc-loan",
            "account_code": "2000",
            "account_name": "Bank Loan",
            "account_type": "liability",
            "is_active": True,
            "agency_id": "agency-1",
        },
        {
            "id": "acc-sales",
            "account_code": "4000",
            "account_name": "Sales",
            "account_type": "revenue",
            "is_active": True,
            "agency_id": "agency-1",
        },
        {
            "id": "acc-rent",
            "account_code": "6100",
            "account_name": "Office Rent",
            "account_type": "expense",
            "is_active": True,
            "agency_id": "agency-1",
        },
    ],
    "entries": [
        {
            "id": "je-0001",
            "entry_date": "2026-01-05",
            "status": "posted",
            "description": "Loan drawdown",
            "entry_number": "JE-2026-0001",
            "agency_id": "agency-1",
        },
        {
            "id": "je-0002",
            "entry_date": "2026-01-12",
            "status": "posted",
            "description": "Invoice #42 paid",
            "reference": "INV-42",
            "agency_id": "agency-1",
        },
        {
            "id": "je-0003",
            "entry_date": "2026-01-31",
            "status": "posted",
            "description": "January rent",
            "agency_id": "agency-1",
        },
        {
            "id": "je-0004",
            "entry_date": "2026-02-01",
            "status": "draft",
            "description": "Not yet posted",
            "agency_id": "agency-1",
        },
    ],
    "lines": [
        {
            "id": "ln-1",
            "journal_entry_id": "je-0001",
            "account_id": "acc-cash",
            "debit_amount": "10000.00",
            "credit_amount": "0",
        },
        {
            "id": "ln-2",
            "journal_entry_id": "je-0001",
            "account_id": "acc-loan",
            "debit_amount": "0",
            "credit_amount": "10000.00",
        },
        {
            "id": "ln-3",
            "journal_entry_id": "je-0002",
            "account_id": "acc-cash",
            "debit_amount": "2500.00",
            "credit_amount": "0",
        },
        {
            "id": "ln-4",
            "journal_entry_id": "je-0002",
            "account_id": "acc-sales",
            "debit_amount": "0",
            "credit_amount": "2500.00",
        },
        {
            "id": "ln-5",
            "journal_entry_id": "je-0003",
            "account_id": "acc-rent",
            "debit_amount": "1200.00",
            "credit_amount": "0",
            "description": "Rent - January",
        },
        {
            "id": "ln-6",
            "journal_entry_id": "je-0003",
            "account_id": "acc-cash",
            "debit_amount": "0",
            "credit_amount": "1200.00",
        },
    ],
}


def _parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid --now date: {value!r}") from exc


def _load(args) -> LedgerResult:
    """Load the snapshot named by the common arguments and compute the ledger."""
    snapshot = load_snapshot(args.input)
    base = snapshot.config
    config = LedgerConfig(
        agency_id=args.agency if args.agency is not None else base.agency_id,
        entry_limit=args.limit if args.limit is not None else base.entry_limit,
    )
    return load_ledger(snapshot.to_source(), config, now=args.now)


def _json_default(obj):
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def cmd_example(_) -> int:
    """Print an example snapshot JSON."""
    json.dump(EXAMPLE_SNAPSHOT, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def cmd_summary(args) -> int:
    """Print the ledger summary."""
    try:
        result = _load(args)
    except (LedgerError, ValueError, OSError) as e:
        print(f"Error loading ledger: {e}", file=sys.stderr)
        return 1

    summary = result.summary
    if args.json:
        json.dump(summary.as_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(f"Total Balance:    {format_amount(summary.total_balance)}")
        print(f"Monthly Income:   {format_amount(summary.monthly_income)}")
        print(f"Monthly Expenses: {format_amount(summary.monthly_expenses)}")
        print(f"Net Profit:       {format_amount(summary.net_profit)}")
    return 0


def cmd_transactions(args) -> int:
    """Print the transaction feed in display order."""
    try:
        result = _load(args)
    except (LedgerError, ValueError, OSError) as e:
        print(f"Error loading ledger: {e}", file=sys.stderr)
        return 1

    feed = filter_transactions(result.feed, args.search)
    if args.type:
        feed = transactions_of_type(feed, args.type)

    if args.json:
        rows = [
            {
                "id": t.id,
                "date": format_date(t),
                "reference": t.reference,
                "description": t.description,
                "category": t.category.value,
                "type": t.type.value,
                "amount": t.amount,
                "balance": t.balance,
            }
            for t in feed
        ]
        json.dump(rows, sys.stdout, indent=2, default=_json_default)
        sys.stdout.write("\n")
        return 0

    if not feed:
        print("No transactions found")
        return 0
    for t in feed:
        print(
            f"{format_date(t):<12} {t.reference:<14} {t.type.value.upper():<6} "
            f"{format_amount(t.amount):>12} {format_amount(t.balance):>12}  "
            f"[{t.category.value}] {t.description}"
        )
    return 0


def cmd_balances(args) -> int:
    """Print per-account balances."""
    try:
        result = _load(args)
    except (LedgerError, ValueError, OSError) as e:
        print(f"Error loading ledger: {e}", file=sys.stderr)
        return 1

    for row in result.account_balances():
        label = row.name or row.account_id
        print(
            f"{row.account_code or '-':<8} {label:<24} {row.account_type.value:<10} "
            f"{format_amount(row.balance):>12}"
        )
    print(f"Total Balance (assets): {format_amount(result.summary.total_balance)}")
    return 0


def cmd_export(args) -> int:
    """Export the feed to CSV."""
    try:
        result = _load(args)
        export_ledger_csv(result.feed, args.output)
    except (LedgerError, ValueError, OSError) as e:
        print(f"Error exporting ledger: {e}", file=sys.stderr)
        return 1

    print(f"Ledger exported to {args.output}")
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-i", "--input", required=True, help="Snapshot YAML/JSON file")
    parser.add_argument("--agency", help="Agency id to scope entries and accounts to")
    parser.add_argument(
        "--limit", type=int, help="Maximum number of most recent posted entries"
    )
    parser.add_argument(
        "--now",
        type=_parse_now,
        help="Reference date for the monthly window (YYYY-MM-DD)",
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="ledgerview", description="LedgerView - General ledger reconstruction"
    )

    # Version argument
    parser.add_argument("--version", action="version", version="LedgerView 0.1.0")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    example_parser = subparsers.add_parser(
        "example", help="Print an example snapshot JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    summary_parser = subparsers.add_parser("summary", help="Show the ledger summary")
    _add_common(summary_parser)
    summary_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    summary_parser.set_defaults(func=cmd_summary)

    txn_parser = subparsers.add_parser(
        "transactions", help="List transactions, newest first"
    )
    _add_common(txn_parser)
    txn_parser.add_argument(
        "--search", help="Filter by description, reference or category"
    )
    txn_parser.add_argument(
        "--type", choices=["credit", "debit"], help="Only credits or only debits"
    )
    txn_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    txn_parser.epilog = """
Running balances are accumulated in fetch order (entry date descending) and
are not recomputed after the display sort.
    """
    txn_parser.set_defaults(func=cmd_transactions)

    balances_parser = subparsers.add_parser(
        "balances", help="Show per-account balances"
    )
    _add_common(balances_parser)
    balances_parser.set_defaults(func=cmd_balances)

    export_parser = subparsers.add_parser("export", help="Export transactions to CSV")
    _add_common(export_parser)
    export_parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output CSV file, or a directory for ledger_export_<date>.csv",
    )
    export_parser.set_defaults(func=cmd_export)

    # Parse arguments and execute
    args = parser.parse_args(argv)
    levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    logging.basicConfig(
        level=levels[min(args.verbose, len(levels) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
