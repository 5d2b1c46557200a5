# main.py

"""Entry point for the fare_tracker monitor (TUI or headless)."""

import argparse
import asyncio
import logging
import sys

from fare_tracker.config.logging_config import setup_logging
from fare_tracker.config.settings import Settings
from fare_tracker.fetchers.base_fetcher import (
    BaseFareFetcher,
    load_fetcher_class,
)
from fare_tracker.models.alert import AlertThresholds
from fare_tracker.models.route import RouteQuery

logger = logging.getLogger("fare_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI.

    Values are not validated; missing ones are passed on as ``None``.
    """
    parser = argparse.ArgumentParser(
        prog="fare_tracker",
        description="Watch a round-trip airfare and flag deals.",
    )
    parser.add_argument(
        "--from", dest="origin", default=None,
        help="Origin airport code.",
    )
    parser.add_argument(
        "--to", dest="destination", default=None,
        help="Destination airport code.",
    )
    parser.add_argument(
        "--leave-date", dest="leave_date", default=None,
        help="Outbound date.",
    )
    parser.add_argument(
        "--return-date", dest="return_date", default=None,
        help="Return date.",
    )
    parser.add_argument(
        "--passengers", type=int, default=None,
        help="Number of adult passengers.",
    )
    parser.add_argument(
        "--individual-deal-price", dest="individual_deal_price",
        type=int, default=None,
        help="Alert when the per-passenger price is at or below this.",
    )
    parser.add_argument(
        "--total-deal-price", dest="total_deal_price",
        type=int, default=None,
        help="Alert when the total price is at or below this.",
    )
    parser.add_argument(
        "--interval", type=float,
        default=Settings.DEFAULT_INTERVAL_MINUTES,
        help="Minutes between checks (default: %(default)s).",
    )
    parser.add_argument(
        "--headless", action="store_true", default=False,
        help="Print to the console instead of opening the dashboard.",
    )
    parser.add_argument(
        "--once", action="store_true", default=False,
        help="Check the fare once, print the result and exit.",
    )
    return parser


def _route_from_args(args: argparse.Namespace) -> RouteQuery:
    """Collect the route fields from parsed arguments."""
    return RouteQuery(
        origin=args.origin,
        destination=args.destination,
        leave_date=args.leave_date,
        return_date=args.return_date,
        passengers=args.passengers,
    )


def _thresholds_from_args(args: argparse.Namespace) -> AlertThresholds:
    """Collect the deal thresholds from parsed arguments."""
    return AlertThresholds(
        individual=args.individual_deal_price,
        total=args.total_deal_price,
    )


def _create_fetcher() -> BaseFareFetcher:
    """Instantiate the configured fare fetcher."""
    fetcher_cls = load_fetcher_class(Settings.FARE_FETCHER)
    fetcher: BaseFareFetcher = fetcher_cls()
    return fetcher


def _run_tui(args: argparse.Namespace) -> None:
    """Launch the interactive Textual dashboard."""
    from fare_tracker.services.notifier import SmsNotifier
    from fare_tracker.ui.app import FareDashboardApp

    try:
        app = FareDashboardApp(
            route=_route_from_args(args),
            thresholds=_thresholds_from_args(args),
            fetcher=_create_fetcher(),
            notifier=SmsNotifier(),
            interval_minutes=args.interval,
        )
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("fare_tracker TUI shutting down")
    sys.exit(0)


def _run_headless(args: argparse.Namespace) -> None:
    """Monitor from the console until Ctrl-C."""
    from fare_tracker.cli.runner import run_headless
    from fare_tracker.services.notifier import SmsNotifier

    try:
        exit_code = asyncio.run(
            run_headless(
                route=_route_from_args(args),
                thresholds=_thresholds_from_args(args),
                fetcher=_create_fetcher(),
                interval_minutes=args.interval,
                notifier=SmsNotifier(),
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        exit_code = 0
    sys.exit(exit_code)


def _run_once(args: argparse.Namespace) -> None:
    """Run a single cycle and exit with its status."""
    from fare_tracker.cli.runner import run_once
    from fare_tracker.services.notifier import SmsNotifier

    exit_code = asyncio.run(
        run_once(
            route=_route_from_args(args),
            thresholds=_thresholds_from_args(args),
            fetcher=_create_fetcher(),
            notifier=SmsNotifier(),
        )
    )
    sys.exit(exit_code)


def main() -> None:
    """Route to the dashboard, headless loop or a single check."""
    log_file = setup_logging()
    logger.info("fare_tracker starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.once:
        _run_once(args)
    elif args.headless:
        _run_headless(args)
    else:
        _run_tui(args)


if __name__ == "__main__":
    main()
