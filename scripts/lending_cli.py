#!/usr/bin/env python3
"""Quote loans, print amortization schedules and seed demo data.

Usage::

    python scripts/lending_cli.py quote --value 500000 --encumbered 300000 \\
        --amount 150000 --rate 3.5 --term 360
    python scripts/lending_cli.py schedule --principal 300000 --rate 3.5 --term 360
    python scripts/lending_cli.py seed --memory
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from prop_lending.config import LendingConfig, PostgresConfig
from prop_lending.exceptions import LendingError
from prop_lending.generators import seed_if_empty
from prop_lending.logging import setup_logging
from prop_lending.store import InMemoryLoanRepository, InMemoryPropertyRepository
from prop_lending.underwriting import (
    format_currency,
    format_percent,
    generate_schedule,
    loan_to_value,
    max_loan_amount,
    monthly_payment,
    remaining_equity,
    suggested_loan_amount,
    total_repayment,
)

logger = logging.getLogger(__name__)


def cmd_quote(args: argparse.Namespace, config: LendingConfig) -> int:
    """Print the equity and payment figures for a prospective loan."""
    ltv_cap = args.ltv_cap if args.ltv_cap is not None else config.policy.ltv_cap
    equity = remaining_equity(args.value, args.encumbered)
    maximum = max_loan_amount(equity, args.value, ltv_cap)

    print(f"Property value:     {format_currency(args.value)}")
    print(f"Encumbered:         {format_currency(args.encumbered)}")
    print(f"Available equity:   {format_currency(equity)}")
    print(f"Max loan ({ltv_cap:.0%} LTV): {format_currency(maximum)}")
    print(
        "Suggested amount:   "
        f"{format_currency(suggested_loan_amount(maximum, args.value, config.policy.suggested_ltv))}"
    )

    if args.amount is not None:
        payment = monthly_payment(args.amount, args.rate, args.term)
        print(f"Requested amount:   {format_currency(args.amount)}")
        print(f"Loan-to-value:      {format_percent(loan_to_value(args.amount, args.value))}")
        print(f"Monthly payment:    {format_currency(payment, decimals=2)}")
        print(f"Total repayment:    {format_currency(total_repayment(args.amount, args.rate, args.term), decimals=2)}")
        if args.amount > maximum:
            print(f"REJECTED: amount exceeds maximum of {format_currency(maximum)}")
            return 1
    return 0


def cmd_schedule(args: argparse.Namespace, config: LendingConfig) -> int:
    """Print the repayment schedule of a loan."""
    start = date.fromisoformat(args.start) if args.start else date.today()
    schedule = generate_schedule(args.principal, args.rate, args.term, start)
    shown = schedule[: args.limit] if args.limit else schedule

    print(f"{'#':>4}  {'Due date':<10}  {'Amount':>12}  Status")
    for i, entry in enumerate(shown, start=1):
        print(
            f"{i:>4}  {entry.due_date.isoformat():<10}  "
            f"{format_currency(entry.amount, decimals=2):>12}  {entry.status.value}"
        )
    if len(shown) < len(schedule):
        print(f"... and {len(schedule) - len(shown)} more payments")
    return 0


def cmd_seed(args: argparse.Namespace, config: LendingConfig) -> int:
    """Load the demo data set into the configured repositories."""
    if args.memory:
        properties = InMemoryPropertyRepository()
        loans = InMemoryLoanRepository(property_repository=properties)
        inserted = seed_if_empty(properties, loans)
    else:
        from prop_lending.store.postgres import (
            PostgresLoanRepository,
            PostgresPropertyRepository,
        )

        pg_config = config.postgres
        if args.postgres_host:
            pg_config = PostgresConfig(
                host=args.postgres_host,
                port=pg_config.port,
                database=pg_config.database,
                user=pg_config.user,
                password=pg_config.password,
            )
        properties = PostgresPropertyRepository(pg_config)
        loans = PostgresLoanRepository(pg_config)
        try:
            properties.ensure_schema()
            inserted = seed_if_empty(properties, loans)
        finally:
            properties.close()
            loans.close()

    for entity, count in inserted.items():
        print(f"  {entity}: {count} inserted")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description="Property-backed lending tools")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL env or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Quote a loan against a property")
    quote.add_argument("--value", type=float, required=True, help="Appraised property value")
    quote.add_argument(
        "--encumbered",
        type=float,
        default=0.0,
        help="Outstanding principal of existing loans (default: 0)",
    )
    quote.add_argument("--amount", type=float, default=None, help="Requested loan amount")
    quote.add_argument("--rate", type=float, default=3.5, help="Annual interest rate in percent (default: 3.5)")
    quote.add_argument("--term", type=int, default=360, help="Term in months (default: 360)")
    quote.add_argument("--ltv-cap", type=float, default=None, help="LTV cap as a fraction (default: LTV_CAP env or 0.8)")
    quote.set_defaults(func=cmd_quote)

    schedule = subparsers.add_parser("schedule", help="Print an amortization schedule")
    schedule.add_argument("--principal", type=float, required=True, help="Loan principal")
    schedule.add_argument("--rate", type=float, required=True, help="Annual interest rate in percent")
    schedule.add_argument("--term", type=int, required=True, help="Term in months")
    schedule.add_argument("--start", type=str, default=None, help="Start date YYYY-MM-DD (default: today)")
    schedule.add_argument("--limit", type=int, default=12, help="Rows to print, 0 for all (default: 12)")
    schedule.set_defaults(func=cmd_schedule)

    seed = subparsers.add_parser("seed", help="Seed demo data into empty repositories")
    seed.add_argument("--memory", action="store_true", help="Seed in-memory repositories only")
    seed.add_argument("--postgres-host", type=str, default=None, help="Override POSTGRES_HOST")
    seed.set_defaults(func=cmd_seed)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = LendingConfig.from_env()
    setup_logging(level=args.log_level or config.log_level)

    try:
        return args.func(args, config)
    except LendingError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
