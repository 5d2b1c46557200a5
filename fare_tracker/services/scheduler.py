# fare_tracker/services/scheduler.py

"""Serial, self-rescheduling cycle loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger("fare_tracker.scheduler")

CycleFn = Callable[[], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[Any]]


class Scheduler:
    """Runs a cycle, waits, and runs it again until stopped.

    The wait starts only after the previous cycle has settled, so at most
    one cycle is ever in flight and the effective period is the cycle
    duration plus the interval.  A cycle that raises is logged and the
    loop carries on after the normal interval.
    """

    def __init__(self, sleep: SleepFn = asyncio.sleep) -> None:
        self._sleep = sleep
        self._stopped = False
        self._task: asyncio.Task[Any] | None = None
        self.cycles_run = 0

    @property
    def stopped(self) -> bool:
        """True once :meth:`stop` has been called."""
        return self._stopped

    async def run(self, interval_seconds: float, cycle_fn: CycleFn) -> None:
        """Repeat *cycle_fn* with *interval_seconds* between runs."""
        self._task = asyncio.current_task()
        logger.info(
            "Scheduler started, interval %.1fs", interval_seconds
        )
        try:
            while not self._stopped:
                try:
                    await cycle_fn()
                except Exception:
                    logger.error(
                        "Cycle %d failed", self.cycles_run + 1,
                        exc_info=True,
                    )
                self.cycles_run += 1
                if self._stopped:
                    break
                await self._sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info(
                "Scheduler cancelled after %d cycles", self.cycles_run
            )
            if not self._stopped:
                raise
            return
        finally:
            self._task = None
        logger.info("Scheduler stopped after %d cycles", self.cycles_run)

    def stop(self) -> None:
        """Stop the loop now, abandoning any cycle still in flight."""
        self._stopped = True
        task = self._task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
