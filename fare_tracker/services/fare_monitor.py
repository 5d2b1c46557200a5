# fare_tracker/services/fare_monitor.py

"""One monitoring session: fetch, diff, record, alert and present."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, TypeVar, cast

from rich.markup import escape

from fare_tracker.config.settings import Settings
from fare_tracker.fetchers.base_fetcher import BaseFareFetcher, FetchError
from fare_tracker.models.alert import (
    AlertDecision,
    AlertReason,
    AlertThresholds,
)
from fare_tracker.models.fare_diff import CycleDiff, DiffDirection, FareDiff
from fare_tracker.models.fare_state import FareState
from fare_tracker.models.route import RouteQuery
from fare_tracker.models.series_point import PlotSeries, SeriesPoint
from fare_tracker.services.notifier import AlertNotifier, NotificationError
from fare_tracker.storage.series_store import SeriesStore
from fare_tracker.tracking.alert_evaluator import AlertEvaluator
from fare_tracker.tracking.diff_engine import DiffEngine

logger = logging.getLogger("fare_tracker.monitor")

_T = TypeVar("_T")


class Presenter(Protocol):
    """Display sink for a monitoring session."""

    def log(self, lines: list[str]) -> None: ...

    def plot(self, series: PlotSeries) -> None: ...

    def render(self) -> None: ...


class CycleStatus(Enum):
    """How a single cycle ended."""

    OK = "ok"
    INVALID = "invalid"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of :meth:`FareMonitor.run_cycle`."""

    status: CycleStatus
    diff: CycleDiff | None = None
    decision: AlertDecision | None = None
    error: str = ""


def format_diff(diff: FareDiff, currency: str = "$") -> str:
    """Render a diff as a Rich-markup suffix like ``(down $50)``."""
    if diff.direction is DiffDirection.DOWN:
        return f"[green](down {currency}{diff.magnitude})[/green]"
    if diff.direction is DiffDirection.UP:
        return f"[red](up {currency}{diff.magnitude})[/red]"
    if diff.direction is DiffDirection.NONE:
        return "[blue](no change)[/blue]"
    return ""


def format_alert(
    route: RouteQuery,
    decision: AlertDecision,
    thresholds: AlertThresholds,
    currency: str = "$",
) -> str:
    """Build the notification text for a fired decision."""
    passengers = max(route.passengers or 1, 1)
    if decision.reason is AlertReason.TOTAL:
        limit = f"total deal price of {currency}{thresholds.total}"
    else:
        limit = f"individual deal price of {currency}{thresholds.individual}"
    return (
        f"Deal alert {route.label} "
        f"({route.leave_date} - {route.return_date}): "
        f"{currency}{decision.total} total for {passengers} passenger(s), "
        f"{currency}{decision.per_passenger:.0f} each, "
        f"is within your {limit}."
    )


async def run_detached(func: Callable[..., _T], *args: Any) -> _T:
    """Run blocking *func* on a daemon thread and await its result.

    Unlike ``asyncio.to_thread`` the thread is not owned by the loop's
    executor, so cancelling the awaiting task, closing the loop or exiting
    the interpreter never waits for it.  A result that arrives after the
    caller was cancelled or the loop was closed is dropped.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[_T] = loop.create_future()

    def _settle(result: Any, error: Exception | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _target() -> None:
        result: Any = None
        error: Exception | None = None
        try:
            result = func(*args)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_settle, result, error)
        except RuntimeError:
            logger.debug(
                "Discarded result of %s, event loop already closed",
                getattr(func, "__qualname__", func),
            )

    threading.Thread(
        target=_target,
        name=f"fare-worker-{getattr(func, '__name__', 'call')}",
        daemon=True,
    ).start()
    return await future


class FareMonitor:
    """Owns the fare state and series of one route and runs its cycles.

    The state and series are only changed after a fetch has fully
    returned, so cancelling a cycle mid-fetch leaves both untouched.
    """

    def __init__(
        self,
        route: RouteQuery,
        thresholds: AlertThresholds,
        fetcher: BaseFareFetcher,
        presenter: Presenter,
        notifier: AlertNotifier | None = None,
        state: FareState | None = None,
        series: SeriesStore | None = None,
    ) -> None:
        self.route = route
        self.thresholds = thresholds
        self.fetcher = fetcher
        self.presenter = presenter
        self.notifier = notifier
        self.settings = Settings()
        self.diff_engine = DiffEngine(state)
        self.series = series if series is not None else SeriesStore()
        self.evaluator = AlertEvaluator()

    @property
    def state(self) -> FareState:
        """The lowest fares seen so far."""
        return self.diff_engine.state

    # ── Cycle ────────────────────────────────────────────

    async def run_cycle(self) -> CycleResult:
        """Perform one fetch → diff → store → alert → present pass."""
        self.presenter.log(["Searching..."])
        route = self.route
        try:
            snapshot = await run_detached(
                self.fetcher.fetch,
                route.origin,
                route.destination,
                route.leave_date,
                route.return_date,
                route.passengers,
            )
        except FetchError as exc:
            logger.warning("Fetch failed for %s: %s", route.label, exc)
            return self._fetch_failed(str(exc))
        except Exception as exc:
            logger.error(
                "Fetcher raised unexpectedly for %s", route.label,
                exc_info=True,
            )
            return self._fetch_failed(f"{type(exc).__name__}: {exc}")

        diff = self.diff_engine.apply(snapshot)
        if not diff.is_valid:
            self.presenter.log(["Fares are invalid."])
            self.presenter.render()
            return CycleResult(CycleStatus.INVALID, diff=diff)

        # Both legs parsed, so both lowest fares are set
        lowest_outbound = cast(int, self.state.lowest_outbound)
        lowest_inbound = cast(int, self.state.lowest_inbound)

        self.series.append(
            SeriesPoint(
                timestamp=datetime.now(),
                outbound_lowest=lowest_outbound,
                inbound_lowest=lowest_inbound,
            )
        )
        self.presenter.log(self._fare_lines(diff))
        self.presenter.plot(self.series.as_plot_series())

        decision = self.evaluator.evaluate(
            lowest_outbound,
            lowest_inbound,
            route.passengers,
            self.thresholds,
        )
        if decision.fired:
            await self._dispatch_alert(decision)

        self.presenter.render()
        return CycleResult(CycleStatus.OK, diff=diff, decision=decision)

    # ── Private helpers ──────────────────────────────────

    def _fetch_failed(self, error: str) -> CycleResult:
        """Report a failed fetch and end the cycle."""
        self.presenter.log([f"Fetch failed: {escape(error)}"])
        self.presenter.render()
        return CycleResult(CycleStatus.FETCH_FAILED, error=error)

    def _fare_lines(self, diff: CycleDiff) -> list[str]:
        """Describe both legs' current fares against their best."""
        currency = self.settings.CURRENCY_SYMBOL
        lines: list[str] = []
        for leg, current, leg_diff, lowest in (
            (
                "an outbound",
                diff.parsed.outbound,
                diff.outbound,
                self.state.lowest_outbound,
            ),
            (
                "a return",
                diff.parsed.inbound,
                diff.inbound,
                self.state.lowest_inbound,
            ),
        ):
            parts = [
                f"Lowest fare for {leg} flight is currently "
                f"{currency}{current}",
                format_diff(leg_diff, currency),
            ]
            if lowest != current:
                parts.append(f"(best seen {currency}{lowest})")
            lines.append(" ".join(p for p in parts if p))
        return lines

    async def _dispatch_alert(self, decision: AlertDecision) -> None:
        """Log a fired decision and hand it to the notifier, if any."""
        message = format_alert(
            self.route,
            decision,
            self.thresholds,
            self.settings.CURRENCY_SYMBOL,
        )
        logger.info(
            "Deal threshold met (%s): %s",
            decision.reason.value,
            message,
        )
        self.presenter.log([f"[bold yellow]{escape(message)}[/bold yellow]"])

        if self.notifier is None or not self.notifier.is_configured:
            return
        try:
            sent = await run_detached(self.notifier.send, message)
        except NotificationError as exc:
            logger.error("Alert delivery failed: %s", exc, exc_info=True)
            self.presenter.log(
                [f"[red]SMS alert failed: {escape(str(exc))}[/red]"]
            )
            return
        if sent:
            self.presenter.log(["SMS alert sent."])
