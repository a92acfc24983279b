"""Command-line interface for trove hints and redemptions."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .logging_setup import configure_logging
from .models import RedemptionPlan
from .services import TroveClient


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="trovekit",
        description="Hint finding and redemption planning for trove transactions",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    hint_parser = sub.add_parser("hint", help="Find an insertion hint for a trove")
    hint_parser.add_argument("collateral", help="Trove collateral")
    hint_parser.add_argument("debt", help="Trove debt, including the liquidation reserve")

    plan_parser = sub.add_parser("plan-redemption", help="Show how much of an amount is redeemable")
    plan_parser.add_argument("amount", help="Debt-token amount to redeem")

    redeem_parser = sub.add_parser("redeem", help="Send a redemption transaction")
    redeem_parser.add_argument("amount", help="Debt-token amount to redeem")
    redeem_parser.add_argument(
        "--increase",
        action="store_true",
        help="If truncated, raise the amount by the minimum net debt instead",
    )
    redeem_parser.add_argument(
        "--wait", action="store_true", help="Wait for the transaction receipt"
    )
    redeem_parser.add_argument(
        "--max-rate", default=None, help="Maximum acceptable redemption fee rate"
    )

    return parser


def format_plan(plan: RedemptionPlan) -> str:
    lines = [
        f"Attempted:  {plan.attempted_amount.prettify()}",
        f"Redeemable: {plan.redeemable_amount.prettify()}",
        f"Truncated:  {'yes' if plan.is_truncated else 'no'}",
        f"Fee:        {plan.fee.prettify(4)} ({plan.fee_rate.to_string(4)})",
    ]
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    client = TroveClient(config)

    if args.command == "hint":
        hint = await client.find_hint(args.collateral, args.debt)
        print(f"upper: {hint.upper_hint}")
        print(f"lower: {hint.lower_hint}")
    elif args.command == "plan-redemption":
        plan = await client.plan_redemption(args.amount)
        print(format_plan(plan))
    elif args.command == "redeem":
        redemption, receipt = await client.redeem(
            args.amount,
            increase_if_truncated=args.increase,
            wait=args.wait,
            max_redemption_rate=args.max_rate,
        )
        print(format_plan(redemption.plan))
        if receipt is not None:
            print(f"Status: {receipt.status.value} ({receipt.transaction_hash})")
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
