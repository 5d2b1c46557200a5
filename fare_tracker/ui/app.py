# fare_tracker/ui/app.py

"""Terminal dashboard for the fare_tracker monitor."""

import logging
from datetime import datetime

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Footer,
    Header,
    Label,
    RichLog,
    Sparkline,
    Static,
)

from fare_tracker.config.settings import Settings
from fare_tracker.fetchers.base_fetcher import BaseFareFetcher
from fare_tracker.models.alert import AlertThresholds
from fare_tracker.models.route import RouteQuery
from fare_tracker.models.series_point import PlotSeries
from fare_tracker.services.fare_monitor import FareMonitor
from fare_tracker.services.notifier import AlertNotifier
from fare_tracker.services.scheduler import Scheduler
from fare_tracker.storage.chart_exporter import export_fare_chart

logger = logging.getLogger("fare_tracker.ui")


def describe_session(
    route: RouteQuery,
    thresholds: AlertThresholds,
    interval_minutes: float,
    currency: str = "$",
) -> str:
    """One-line summary of what is being monitored."""
    def price(value: int | None) -> str:
        return f"{currency}{value}" if value is not None else "off"

    if thresholds.enabled:
        deals = (
            f"individual deal: {price(thresholds.individual)} | "
            f"total deal: {price(thresholds.total)}"
        )
    else:
        deals = "deal alerts off"
    return (
        f"{route.label} | {route.leave_date or '?'} - "
        f"{route.return_date or '?'} | "
        f"{route.passengers or '?'} passenger(s) | "
        f"{deals} | every {interval_minutes:g} min"
    )


class DashboardPresenter:
    """Presenter that draws a monitor's output on a :class:`FareDashboardApp`.

    Textual already claims ``App.log`` and ``App.render``, so the app
    exposes its own drawing methods and this adapter maps the presenter
    calls onto them.
    """

    def __init__(self, app: "FareDashboardApp") -> None:
        self.app = app

    def log(self, lines: list[str]) -> None:
        self.app.write_log(lines)

    def plot(self, series: PlotSeries) -> None:
        self.app.plot_series(series)

    def render(self) -> None:
        self.app.refresh()


class FareDashboardApp(App[int]):
    """Live price graphs and a cycle log for one monitored route.

    The app draws its :class:`FareMonitor` through a
    :class:`DashboardPresenter` and runs the :class:`Scheduler` loop as a
    worker, so quitting the app abandons any cycle that is still fetching.
    """

    TITLE = "Flight Checker"
    CSS_PATH = "styles.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("e", "export_chart", "Export Chart"),
    ]

    def __init__(
        self,
        route: RouteQuery,
        thresholds: AlertThresholds,
        fetcher: BaseFareFetcher,
        notifier: AlertNotifier | None = None,
        interval_minutes: float = Settings.DEFAULT_INTERVAL_MINUTES,
        scheduler: Scheduler | None = None,
        autostart: bool = True,
    ) -> None:
        super().__init__()
        self.settings = Settings()
        self.interval_minutes = interval_minutes
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.autostart = autostart
        self.monitor = FareMonitor(
            route=route,
            thresholds=thresholds,
            fetcher=fetcher,
            presenter=DashboardPresenter(self),
            notifier=notifier,
        )

    def compose(self) -> ComposeResult:
        """Build the widget tree: graphs on top, log below."""
        yield Header()
        yield Static(
            describe_session(
                self.monitor.route,
                self.monitor.thresholds,
                self.interval_minutes,
                self.settings.CURRENCY_SYMBOL,
            ),
            id="route_summary",
        )
        yield Horizontal(
            Vertical(
                Label("Origin/Outbound", id="outbound_label"),
                Sparkline([], id="outbound_graph"),
                classes="leg",
            ),
            Vertical(
                Label("Destination/Return", id="inbound_label"),
                Sparkline([], id="inbound_graph"),
                classes="leg",
            ),
            id="graphs",
        )
        yield RichLog(id="log", markup=True, wrap=True)
        yield Footer()

    def on_mount(self) -> None:
        """Label the panes and start the monitoring loop."""
        self.query_one("#graphs", Horizontal).border_title = "Prices"
        self.query_one("#log", RichLog).border_title = "Log"
        if self.autostart:
            self.start_monitoring()

    def start_monitoring(self) -> None:
        """Run the scheduler loop as an exclusive background worker."""
        self.run_worker(
            self.scheduler.run(
                self.interval_minutes * 60,
                self.monitor.run_cycle,
            ),
            name="fare-scheduler",
            group="monitor",
            exclusive=True,
        )

    # ── Display ──────────────────────────────────────────

    def write_log(self, lines: list[str]) -> None:
        """Append timestamped lines to the log pane."""
        now = datetime.now().strftime(self.settings.LOG_TIMESTAMP_FORMAT)
        rich_log = self.query_one("#log", RichLog)
        for line in lines:
            rich_log.write(f"{now}: {line}")

    def plot_series(self, series: PlotSeries) -> None:
        """Replace both graphs with the most recent window of *series*."""
        window = series.tail(self.settings.PLOT_WINDOW)
        currency = self.settings.CURRENCY_SYMBOL
        for leg, title, values in (
            ("outbound", "Origin/Outbound", window.outbound),
            ("inbound", "Destination/Return", window.inbound),
        ):
            self.query_one(f"#{leg}_graph", Sparkline).data = [
                float(v) for v in values
            ]
            label = (
                f"{title}  lowest {currency}{values[-1]}"
                if values
                else title
            )
            self.query_one(f"#{leg}_label", Label).update(label)

    # ── Actions ──────────────────────────────────────────

    async def action_quit(self) -> None:
        """Stop the monitor immediately and exit cleanly."""
        self.scheduler.stop()
        self.exit(0)

    def action_export_chart(self) -> None:
        """Export the fare history to an HTML chart."""
        series = self.monitor.series.as_plot_series()
        if not series.timestamps:
            self.notify("No fares recorded yet", severity="warning")
            return
        try:
            path = export_fare_chart(series, self.monitor.route.label)
            logger.info("Exported chart to %s", path)
            self.notify(f"Chart saved to {path}")
        except Exception as e:
            logger.error("Failed to export chart", exc_info=True)
            self.notify(f"Export failed: {e}", severity="error")
