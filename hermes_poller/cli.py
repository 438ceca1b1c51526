"""Command-line interface for the Hermes price poller."""
from __future__ import annotations

import argparse
import asyncio
import logging
import math
import signal
import sys

from .config import AppConfig, load_config
from .errors import ConfigurationError, RequestError
from .hermes import FeedCatalog, HermesClient
from .logging_setup import configure_logging
from .models import TrackedFeed
from .reporting import ConsoleReporter
from .services import PollingScheduler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="hermes-poller",
        description="Poll and discover Pyth Hermes price feeds",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, "
        "or built-in BTC/ETH/SOL feeds)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    sub = parser.add_subparsers(dest="command")

    poll_parser = sub.add_parser("poll", help="Continuous polling loop")
    poll_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Polling interval in seconds (overrides config)",
    )

    price_parser = sub.add_parser("price", help="Fetch prices once, with details")
    price_parser.add_argument(
        "feed_ids",
        nargs="*",
        help="Feed ids to fetch (default: configured feeds)",
    )

    feeds_parser = sub.add_parser("feeds", help="List available feeds")
    feeds_parser.add_argument(
        "--asset-type",
        default=None,
        help="Only list feeds of this asset type, e.g. crypto, fx, equity",
    )

    search_parser = sub.add_parser("search", help="Search feeds by symbol or base asset")
    search_parser.add_argument("query", help="Case-insensitive substring")

    return parser


def _install_signal_handlers(scheduler: PollingScheduler) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform; KeyboardInterrupt still ends the run.
            logger.debug("Cannot install handler for %s", sig)


async def _poll(client: HermesClient, config: AppConfig, interval: float | None) -> int:
    scheduler = PollingScheduler(
        client,
        config.feeds,
        ConsoleReporter(),
        interval if interval is not None else config.poller.interval_seconds,
    )
    _install_signal_handlers(scheduler)
    await scheduler.run_forever()
    return EXIT_OK


async def _price(client: HermesClient, config: AppConfig, feed_ids: list[str]) -> int:
    feeds = config.feeds
    if feed_ids:
        feeds = tuple(TrackedFeed(label=fid, feed_id=fid) for fid in feed_ids)

    scheduler = PollingScheduler(client, feeds, ConsoleReporter(verbose=True))
    report = await scheduler.run_cycle()
    return EXIT_FAILURE if report.errors else EXIT_OK


async def _catalog(client: HermesClient, args: argparse.Namespace) -> int:
    catalog = FeedCatalog(client)
    try:
        if args.command == "search":
            descriptors = await catalog.search(args.query)
        elif args.asset_type:
            descriptors = await catalog.filter_by_asset_type(args.asset_type)
        else:
            descriptors = await catalog.list_feeds()
    except RequestError as e:
        print(f"Error fetching feed catalog: {e}", file=sys.stderr)
        return EXIT_FAILURE

    ConsoleReporter().report_catalog(descriptors)
    return EXIT_OK


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        if args.command == "poll" and args.interval is not None:
            if not math.isfinite(args.interval) or args.interval <= 0:
                raise ConfigurationError("Polling interval must be a positive number")
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    client = HermesClient(config.hermes)
    try:
        client.open()
    except (OSError, ValueError) as e:
        print(f"Cannot create HTTP client: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        if args.command == "poll":
            return await _poll(client, config, args.interval)
        if args.command == "price":
            return await _price(client, config, args.feed_ids)
        return await _catalog(client, args)
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_FAILURE)

    try:
        code = asyncio.run(_run(args))
    except KeyboardInterrupt:
        code = EXIT_OK
    sys.exit(code)
