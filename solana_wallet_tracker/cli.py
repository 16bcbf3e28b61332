"""Command-line interface for the Solana wallet tracker."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from .addresses import is_valid_wallet_address
from .config import AppConfig, SolscanConfig, load_config
from .logging_setup import configure_logging
from .models import TrackedWallet
from .services import Monitor, WalletService
from .services.activity import all_token_symbols, filter_wallets_by_tokens
from .services.aggregator import build_significance_filter
from .services.report import render_wallet
from .solscan import SolscanClient, TokenInfoResolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="solana-wallet-tracker",
        description="Track Solana wallets, their bundled wallets and token positions",
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

    track_parser = sub.add_parser("track", help="One-shot lookup of wallet addresses")
    track_parser.add_argument("addresses", nargs="+", help="Wallet addresses")
    track_parser.add_argument(
        "--min-usd",
        type=float,
        default=1.0,
        help="Hide activity below this USD value (default: 1)",
    )
    track_parser.add_argument(
        "--token",
        action="append",
        default=[],
        dest="tokens",
        metavar="SYMBOL",
        help="Only show these token symbols (repeatable)",
    )
    track_parser.add_argument(
        "--significant-only",
        action="store_true",
        help="Drop dust holdings using the monitor.significance thresholds, even when disabled there",
    )

    sub.add_parser(
        "check", help="Single refresh of configured wallets; alerts on changes since the saved state"
    )
    sub.add_parser("report", help="Send a portfolio report")

    monitor_parser = sub.add_parser("monitor", help="Continuous monitoring loop")
    monitor_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Check interval in minutes (overrides config)",
    )

    return parser


def validate_addresses(addresses: list[str]) -> list[str]:
    """Strip and validate addresses; raise ValueError on bad or repeated input."""
    cleaned = [a.strip() for a in addresses if a.strip()]
    if not cleaned:
        raise ValueError("Please enter at least one wallet address")

    seen: set[str] = set()
    for address in cleaned:
        if not is_valid_wallet_address(address):
            raise ValueError(f"Invalid Solana wallet address: {address}")
        if address in seen:
            raise ValueError(f"Wallet is already being tracked: {address}")
        seen.add(address)
    return cleaned


def _track_config(config_path: str | None) -> AppConfig:
    """Config for ``track``: the YAML file when present, else env defaults."""
    try:
        return load_config(config_path, require_wallets=False)
    except FileNotFoundError:
        if config_path is not None:
            raise
        load_dotenv()
        return AppConfig(solscan=SolscanConfig(api_key=os.environ.get("SOLSCAN_API_KEY", "")))


async def _track(args: argparse.Namespace) -> int:
    addresses = validate_addresses(args.addresses)
    config = _track_config(args.config)

    client = SolscanClient(config.solscan)
    resolver = TokenInfoResolver(client, ttl=config.solscan.token_cache_ttl_seconds)
    significance = build_significance_filter(
        config.monitor.significance, force=args.significant_only
    )
    service = WalletService(client, resolver, significance)

    wallets: list[TrackedWallet] = []
    for address in addresses:
        try:
            wallets.append(await service.refresh(address))
            logger.info("Processed %s", address)
        except Exception as e:
            logger.error("Failed to process %s: %s", address, e)

    if not wallets:
        print("Failed to add any wallets", file=sys.stderr)
        return 1

    now = datetime.now(timezone.utc)
    shown = filter_wallets_by_tokens(wallets, args.tokens)
    for wallet in shown:
        print(render_wallet(wallet, now, min_activity_usd=args.min_usd))
        print()

    if args.tokens and not shown:
        print(f"No wallets hold {', '.join(args.tokens)}")
    print(f"Tokens held: {', '.join(all_token_symbols(wallets)) or '—'}")
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)

    if args.command == "track":
        return await _track(args)

    config = load_config(args.config)
    monitor = Monitor(config)

    if args.command == "check":
        await monitor.check_and_alert()
    elif args.command == "report":
        await monitor.generate_report()
    elif args.command == "monitor":
        await monitor.run_continuous(args.interval)
    else:
        build_parser().print_help()
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except ValueError as e:
        parser.error(str(e))
