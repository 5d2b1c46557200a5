# fare_tracker/cli/runner.py

"""Headless monitor runner that reuses the async fare monitor."""

import logging
from datetime import datetime

from rich.console import Console
from rich.table import Table

from fare_tracker.config.settings import Settings
from fare_tracker.fetchers.base_fetcher import BaseFareFetcher
from fare_tracker.models.alert import AlertThresholds
from fare_tracker.models.route import RouteQuery
from fare_tracker.models.series_point import PlotSeries
from fare_tracker.services.fare_monitor import (
    CycleResult,
    CycleStatus,
    FareMonitor,
)
from fare_tracker.services.notifier import AlertNotifier
from fare_tracker.services.scheduler import Scheduler

logger = logging.getLogger("fare_tracker.cli")

# Stderr console for status messages so stdout stays clean
_err = Console(stderr=True)


class ConsolePresenter:
    """Presenter that prints cycle output to a Rich console.

    ``plot`` keeps the latest series and ``render`` prints a summary row
    of it, since a plain terminal cannot redraw a graph in place.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else _err
        self.settings = Settings()
        self.series = PlotSeries()
        self._plotted = False

    def log(self, lines: list[str]) -> None:
        """Print each line with a timestamp prefix."""
        now = datetime.now().strftime(self.settings.LOG_TIMESTAMP_FORMAT)
        for line in lines:
            self.console.print(f"[dim]{now}:[/dim] {line}")

    def plot(self, series: PlotSeries) -> None:
        """Remember the full series for the next render."""
        self.series = series
        self._plotted = True

    def render(self) -> None:
        """Print the lowest-fare trend once per plotted cycle."""
        if not self._plotted or not self.series.timestamps:
            return
        self._plotted = False
        currency = self.settings.CURRENCY_SYMBOL
        table = Table(
            title="Lowest Fares",
            title_style="bold cyan",
        )
        table.add_column("Points", justify="right", style="dim")
        table.add_column("Outbound", justify="right", style="red")
        table.add_column("Return", justify="right", style="yellow")
        table.add_row(
            str(len(self.series.timestamps)),
            f"{currency}{self.series.outbound[-1]}",
            f"{currency}{self.series.inbound[-1]}",
        )
        self.console.print(table)


def _build_monitor(
    route: RouteQuery,
    thresholds: AlertThresholds,
    fetcher: BaseFareFetcher,
    notifier: AlertNotifier | None,
    console: Console | None,
) -> FareMonitor:
    """Wire a monitor to a console presenter."""
    return FareMonitor(
        route=route,
        thresholds=thresholds,
        fetcher=fetcher,
        presenter=ConsolePresenter(console),
        notifier=notifier,
    )


async def run_headless(
    route: RouteQuery,
    thresholds: AlertThresholds,
    fetcher: BaseFareFetcher,
    interval_minutes: float,
    notifier: AlertNotifier | None = None,
    scheduler: Scheduler | None = None,
    console: Console | None = None,
) -> int:
    """Monitor the route until interrupted; returns the exit code."""
    monitor = _build_monitor(route, thresholds, fetcher, notifier, console)
    loop = scheduler if scheduler is not None else Scheduler()
    _err.print(
        f"[bold]Monitoring:[/bold] {route.label}  "
        f"[dim]every {interval_minutes:g} min, Ctrl-C to quit[/dim]"
    )
    await loop.run(interval_minutes * 60, monitor.run_cycle)
    return 0


async def run_once(
    route: RouteQuery,
    thresholds: AlertThresholds,
    fetcher: BaseFareFetcher,
    notifier: AlertNotifier | None = None,
    console: Console | None = None,
) -> int:
    """Run a single cycle; exit code 0 when it produced valid fares."""
    monitor = _build_monitor(route, thresholds, fetcher, notifier, console)
    result: CycleResult = await monitor.run_cycle()
    if result.status is not CycleStatus.OK:
        logger.warning("Single cycle ended with %s", result.status.value)
        return 1
    return 0
