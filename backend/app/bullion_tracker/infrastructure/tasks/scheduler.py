"""In-process periodic scheduler for the pricing and calibration cycles.

Runs a coroutine job on a fixed interval inside the web process's event
loop. A tick that arrives while the previous run is still in flight is
skipped, so a slow cycle is never executed twice concurrently.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


class PeriodicScheduler:
    """Fires ``job`` every ``interval`` seconds.

    Attributes:
        name: Label used in log messages.
        runs_started: Number of ticks that started a run.
        ticks_skipped: Number of ticks skipped because a run was in flight.
    """

    def __init__(
        self,
        job: Job,
        interval: float,
        clock: Optional[Clock] = None,
        name: str = "job",
        run_immediately: bool = True,
    ) -> None:
        """Initialize the scheduler.

        Args:
            job: Coroutine function run on each tick.
            interval: Seconds between ticks.
            clock: Time source used for sleeping between ticks.
            name: Label used in log messages.
            run_immediately: Fire the first tick on start instead of after
                one interval.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._job = job
        self._interval = interval
        self._clock = clock or SystemClock()
        self.name = name
        self._run_immediately = run_immediately
        self._loop_task: Optional[asyncio.Task] = None
        self._current: Optional[asyncio.Task] = None
        self.runs_started = 0
        self.ticks_skipped = 0

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def is_busy(self) -> bool:
        """Whether a run is currently in flight."""
        return self._current is not None and not self._current.done()

    def start(self) -> None:
        """Start ticking in the background of the running event loop."""
        if self.is_running:
            return
        logger.info(f"Starting {self.name} scheduler (every {self._interval}s)")
        self._loop_task = asyncio.create_task(self._loop(), name=f"{self.name}-scheduler")

    async def stop(self, wait_for_current: bool = True) -> None:
        """Stop ticking.

        Args:
            wait_for_current: Let an in-flight run finish instead of
                cancelling it.
        """
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                logger.info(f"{self.name} scheduler stopped")
            self._loop_task = None

        if self._current is not None and not self._current.done():
            if not wait_for_current:
                self._current.cancel()
            try:
                await self._current
            except asyncio.CancelledError:
                logger.info(f"In-flight {self.name} run cancelled")

    async def tick(self) -> bool:
        """Fire one tick.

        Returns:
            True if a run was started, False if the tick was skipped.
        """
        if self.is_busy:
            self.ticks_skipped += 1
            logger.warning(f"Previous {self.name} run still in flight, skipping tick")
            return False

        self.runs_started += 1
        self._current = asyncio.create_task(self._run_job())
        # Let the run reach its first suspension point before returning
        await asyncio.sleep(0)
        return True

    async def wait_idle(self) -> None:
        """Wait for the in-flight run, if any, to finish."""
        if self._current is not None:
            await asyncio.shield(self._current)

    async def _loop(self) -> None:
        if not self._run_immediately:
            await self._clock.sleep(self._interval)
        while True:
            await self.tick()
            await self._clock.sleep(self._interval)

    async def _run_job(self) -> None:
        try:
            await self._job()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"{self.name} run failed: {e}")
