# tests/test_fare_monitor.py

"""Tests for FareMonitor cycles, alert dispatch and scheduling."""

import asyncio
import threading
import time
import unittest
from unittest.mock import MagicMock

from fare_tracker.fetchers.base_fetcher import BaseFareFetcher, FetchError
from fare_tracker.models.alert import AlertReason, AlertThresholds
from fare_tracker.models.fare_diff import DiffDirection, FareDiff
from fare_tracker.models.fare_snapshot import FareSnapshot
from fare_tracker.models.fare_state import FareState
from fare_tracker.models.route import RouteQuery
from fare_tracker.services.fare_monitor import (
    CycleStatus,
    FareMonitor,
    format_diff,
    run_detached,
)
from fare_tracker.services.notifier import NotificationError
from fare_tracker.services.scheduler import Scheduler

ROUTE = RouteQuery(
    origin="YYZ",
    destination="YVR",
    leave_date="2026-11-01",
    return_date="2026-11-10",
    passengers=2,
)


class _ScriptedFetcher(BaseFareFetcher):
    """Fetcher replaying canned prices; Exceptions in the script are raised."""

    def __init__(self, script: list[tuple[str, str] | Exception]) -> None:
        super().__init__("test")
        self.script = list(script)
        self.calls: list[tuple[object, ...]] = []

    def fetch(
        self,
        origin: str | None,
        destination: str | None,
        leave_date: str | None,
        return_date: str | None,
        passengers: int | None,
    ) -> FareSnapshot:
        self.calls.append(
            (origin, destination, leave_date, return_date, passengers)
        )
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return FareSnapshot(outbound_raw=item[0], inbound_raw=item[1])


def _logged_lines(presenter: MagicMock) -> list[str]:
    """Flatten every line passed to presenter.log."""
    return [
        line
        for call in presenter.log.call_args_list
        for line in call.args[0]
    ]


def _make_monitor(
    script: list[tuple[str, str] | Exception],
    thresholds: AlertThresholds | None = None,
    notifier: MagicMock | None = None,
) -> tuple[FareMonitor, MagicMock]:
    presenter = MagicMock()
    monitor = FareMonitor(
        route=ROUTE,
        thresholds=thresholds or AlertThresholds(),
        fetcher=_ScriptedFetcher(script),
        presenter=presenter,
        notifier=notifier,
    )
    return monitor, presenter


class TestFareMonitorCycles(unittest.IsolatedAsyncioTestCase):
    """Fetch → diff → store → present."""

    async def test_three_cycle_sequence(self) -> None:
        """Baseline, a drop, then a rise with an inbound drop."""
        monitor, presenter = _make_monitor([
            ("$500", "$600"),
            ("$450", "$600"),
            ("$480", "$590"),
        ])

        first = await monitor.run_cycle()
        self.assertEqual(first.status, CycleStatus.OK)
        self.assertEqual(monitor.state, FareState(500, 600))
        self.assertEqual(len(monitor.series), 1)

        second = await monitor.run_cycle()
        assert second.diff is not None
        self.assertEqual(second.diff.outbound, FareDiff(DiffDirection.DOWN, 50))
        self.assertEqual(second.diff.inbound, FareDiff(DiffDirection.NONE, 0))
        self.assertEqual(monitor.state, FareState(450, 600))
        self.assertEqual(len(monitor.series), 2)

        third = await monitor.run_cycle()
        assert third.diff is not None
        self.assertEqual(third.diff.outbound, FareDiff(DiffDirection.UP, 30))
        self.assertEqual(third.diff.inbound, FareDiff(DiffDirection.DOWN, 10))
        self.assertEqual(monitor.state, FareState(450, 590))
        self.assertEqual(len(monitor.series), 3)

        latest = monitor.series.snapshot()[-1]
        self.assertEqual(
            (latest.outbound_lowest, latest.inbound_lowest), (450, 590)
        )
        self.assertEqual(presenter.render.call_count, 3)
        self.assertEqual(presenter.plot.call_count, 3)
        plotted = presenter.plot.call_args.args[0]
        self.assertEqual(plotted.outbound, [500, 450, 450])
        self.assertEqual(plotted.inbound, [600, 600, 590])

    async def test_route_is_passed_to_fetcher(self) -> None:
        """The fetcher receives every route field."""
        monitor, _ = _make_monitor([("$1", "$2")])
        await monitor.run_cycle()
        fetcher = monitor.fetcher
        assert isinstance(fetcher, _ScriptedFetcher)
        self.assertEqual(
            fetcher.calls,
            [("YYZ", "YVR", "2026-11-01", "2026-11-10", 2)],
        )

    async def test_log_lines_describe_diffs(self) -> None:
        """Log output shows the direction and size of each change."""
        monitor, presenter = _make_monitor([
            ("$500", "$600"),
            ("$480", "$650"),
        ])
        await monitor.run_cycle()
        await monitor.run_cycle()
        lines = _logged_lines(presenter)
        self.assertIn("Searching...", lines)
        self.assertTrue(any("down $20" in line for line in lines))
        self.assertTrue(any("up $50" in line for line in lines))
        self.assertTrue(any("best seen $600" in line for line in lines))

    async def test_fetch_failure_leaves_state(self) -> None:
        """A failed fetch changes neither state nor series."""
        monitor, presenter = _make_monitor([
            ("$500", "$600"),
            FetchError("Price element not found: #price_INBOUND"),
        ])
        await monitor.run_cycle()
        result = await monitor.run_cycle()

        self.assertEqual(result.status, CycleStatus.FETCH_FAILED)
        self.assertIn("Price element not found", result.error)
        self.assertEqual(monitor.state, FareState(500, 600))
        self.assertEqual(len(monitor.series), 1)
        self.assertTrue(
            any(
                line.startswith("Fetch failed")
                for line in _logged_lines(presenter)
            )
        )
        self.assertEqual(presenter.render.call_count, 2)

    async def test_invalid_fares_are_skipped(self) -> None:
        """Unparseable text is reported and not recorded."""
        monitor, presenter = _make_monitor([("N/A", "$600")])
        result = await monitor.run_cycle()

        self.assertEqual(result.status, CycleStatus.INVALID)
        self.assertIsNone(result.decision)
        self.assertEqual(len(monitor.series), 0)
        self.assertIn("Fares are invalid.", _logged_lines(presenter))
        presenter.plot.assert_not_called()
        presenter.render.assert_called_once()

    async def test_cancel_mid_fetch_keeps_state(self) -> None:
        """Abandoning a cycle during the fetch mutates nothing."""
        release = threading.Event()
        entered = threading.Event()

        class _SlowFetcher(_ScriptedFetcher):
            def fetch(self, *args: object, **kwargs: object) -> FareSnapshot:
                entered.set()
                release.wait(5)
                return FareSnapshot("$1", "$1")

        presenter = MagicMock()
        monitor = FareMonitor(
            route=ROUTE,
            thresholds=AlertThresholds(total=10_000),
            fetcher=_SlowFetcher([]),
            presenter=presenter,
        )
        task = asyncio.create_task(monitor.run_cycle())
        try:
            await asyncio.to_thread(entered.wait, 5)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task
        finally:
            release.set()

        self.assertEqual(monitor.state, FareState(None, None))
        self.assertEqual(len(monitor.series), 0)
        presenter.plot.assert_not_called()


class TestFareMonitorAlerts(unittest.IsolatedAsyncioTestCase):
    """Threshold evaluation and notification dispatch."""

    def _notifier(self) -> MagicMock:
        notifier = MagicMock()
        notifier.is_configured = True
        notifier.send.return_value = True
        return notifier

    async def test_deal_sends_notification(self) -> None:
        """A met threshold sends one message naming the route."""
        notifier = self._notifier()
        monitor, presenter = _make_monitor(
            [("$250", "$260")],
            AlertThresholds(individual=300),
            notifier,
        )
        result = await monitor.run_cycle()

        assert result.decision is not None
        self.assertTrue(result.decision.fired)
        self.assertEqual(result.decision.reason, AlertReason.INDIVIDUAL)
        notifier.send.assert_called_once()
        message = notifier.send.call_args.args[0]
        self.assertIn("YYZ → YVR", message)
        self.assertIn("$510", message)
        self.assertIn("SMS alert sent.", _logged_lines(presenter))

    async def test_deal_fires_every_cycle(self) -> None:
        """A deal that persists is reported again each cycle."""
        notifier = self._notifier()
        monitor, _ = _make_monitor(
            [("$250", "$260"), ("$255", "$260")],
            AlertThresholds(total=600),
            notifier,
        )
        await monitor.run_cycle()
        await monitor.run_cycle()
        self.assertEqual(notifier.send.call_count, 2)

    async def test_no_deal_no_notification(self) -> None:
        """Fares above the thresholds send nothing."""
        notifier = self._notifier()
        monitor, _ = _make_monitor(
            [("$900", "$900")],
            AlertThresholds(individual=300, total=600),
            notifier,
        )
        result = await monitor.run_cycle()
        assert result.decision is not None
        self.assertFalse(result.decision.fired)
        notifier.send.assert_not_called()

    async def test_unconfigured_notifier_is_skipped(self) -> None:
        """Without credentials the alert is only logged."""
        notifier = self._notifier()
        notifier.is_configured = False
        monitor, presenter = _make_monitor(
            [("$100", "$100")], AlertThresholds(total=500), notifier,
        )
        await monitor.run_cycle()
        notifier.send.assert_not_called()
        self.assertTrue(
            any("Deal alert" in line for line in _logged_lines(presenter))
        )

    async def test_delivery_failure_does_not_fail_cycle(self) -> None:
        """An SMS error is reported and the cycle still succeeds."""
        notifier = self._notifier()
        notifier.send.side_effect = NotificationError("HTTP 401")
        monitor, presenter = _make_monitor(
            [("$100", "$100")], AlertThresholds(total=500), notifier,
        )
        result = await monitor.run_cycle()
        self.assertEqual(result.status, CycleStatus.OK)
        self.assertEqual(len(monitor.series), 1)
        self.assertTrue(
            any(
                "SMS alert failed" in line
                for line in _logged_lines(presenter)
            )
        )


class TestMonitorUnderScheduler(unittest.IsolatedAsyncioTestCase):
    """The monitor driven by the scheduler loop."""

    async def test_failed_fetch_then_next_cycle_runs(self) -> None:
        """After a failed fetch the loop fires again after the interval."""
        monitor, _ = _make_monitor([
            FetchError("timeout"),
            ("$500", "$600"),
        ])
        sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        scheduler = Scheduler(sleep=fake_sleep)
        statuses: list[CycleStatus] = []

        async def cycle() -> None:
            result = await monitor.run_cycle()
            statuses.append(result.status)
            if len(statuses) == 2:
                scheduler.stop()

        await scheduler.run(1800.0, cycle)

        self.assertEqual(
            statuses, [CycleStatus.FETCH_FAILED, CycleStatus.OK]
        )
        self.assertEqual(sleeps, [1800.0])
        self.assertEqual(len(monitor.series), 1)

    async def test_unexpected_fetch_error_keeps_loop_alive(self) -> None:
        """A fetcher crash is reported like a failed fetch and the loop goes on."""
        monitor, presenter = _make_monitor([
            RuntimeError("browser crashed"),
            ("$500", "$600"),
        ])

        async def fake_sleep(seconds: float) -> None:
            if scheduler.cycles_run >= 2:
                scheduler.stop()

        scheduler = Scheduler(sleep=fake_sleep)
        with self.assertLogs("fare_tracker.monitor", level="ERROR"):
            await scheduler.run(1.0, monitor.run_cycle)

        self.assertEqual(scheduler.cycles_run, 2)
        self.assertEqual(monitor.state, FareState(500, 600))
        self.assertIn(
            "Fetch failed: RuntimeError: browser crashed",
            _logged_lines(presenter),
        )
        self.assertEqual(presenter.render.call_count, 2)

    async def test_unexpected_fetch_error_is_fetch_failed(self) -> None:
        """Any fetcher exception ends the cycle as FETCH_FAILED."""
        monitor, presenter = _make_monitor([TimeoutError("read timed out")])
        with self.assertLogs("fare_tracker.monitor", level="ERROR"):
            result = await monitor.run_cycle()

        self.assertEqual(result.status, CycleStatus.FETCH_FAILED)
        self.assertEqual(result.error, "TimeoutError: read timed out")
        self.assertEqual(monitor.state, FareState(None, None))
        presenter.plot.assert_not_called()
        presenter.render.assert_called_once()


class TestStopDuringFetch(unittest.TestCase):
    """Stopping the loop never waits for a fetch still in progress."""

    def test_stop_mid_fetch_returns_promptly(self) -> None:
        """asyncio.run returns without joining the hung fetch thread."""
        release = threading.Event()
        entered = threading.Event()

        class _HangingFetcher(_ScriptedFetcher):
            def fetch(self, *args: object, **kwargs: object) -> FareSnapshot:
                entered.set()
                release.wait(10)
                return FareSnapshot("$1", "$1")

        presenter = MagicMock()
        monitor = FareMonitor(
            route=ROUTE,
            thresholds=AlertThresholds(),
            fetcher=_HangingFetcher([]),
            presenter=presenter,
        )
        scheduler = Scheduler()

        async def main() -> None:
            task = asyncio.create_task(
                scheduler.run(60.0, monitor.run_cycle)
            )
            while not entered.is_set():
                await asyncio.sleep(0.01)
            scheduler.stop()
            await task

        started = time.monotonic()
        try:
            asyncio.run(main())
            elapsed = time.monotonic() - started
        finally:
            release.set()

        self.assertLess(elapsed, 5.0)
        self.assertTrue(scheduler.stopped)
        self.assertEqual(monitor.state, FareState(None, None))
        presenter.plot.assert_not_called()


class TestRunDetached(unittest.IsolatedAsyncioTestCase):
    """Blocking calls off-loaded to a daemon thread."""

    async def test_returns_result(self) -> None:
        """The awaited value is the function's return value."""
        self.assertEqual(await run_detached(sum, [1, 2, 3]), 6)

    async def test_runs_on_daemon_thread(self) -> None:
        """The call does not run on the event loop's thread."""
        thread = await run_detached(threading.current_thread)
        self.assertIsNot(thread, threading.current_thread())
        self.assertTrue(thread.daemon)

    async def test_propagates_exception(self) -> None:
        """An exception in the call is raised to the awaiting task."""
        def boom() -> None:
            raise FetchError("HTTP 503")

        with self.assertRaises(FetchError):
            await run_detached(boom)


class TestFormatDiff(unittest.TestCase):
    """Markup for diff suffixes."""

    def test_directions(self) -> None:
        """Each direction renders its own suffix."""
        self.assertIn("down $5", format_diff(FareDiff(DiffDirection.DOWN, 5)))
        self.assertIn("up $7", format_diff(FareDiff(DiffDirection.UP, 7)))
        self.assertIn("no change", format_diff(FareDiff(DiffDirection.NONE)))
        self.assertEqual(format_diff(FareDiff(DiffDirection.NO_BASELINE)), "")


if __name__ == "__main__":
    unittest.main()
