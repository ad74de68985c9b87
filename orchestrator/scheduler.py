"""
Orchestrator - Cycle Scheduler.

============================================================
RESPONSIBILITY
============================================================
Fires the collection cycle at a fixed interval until stopped.

- First run one full interval after start, never at start-up
- Ticks are anchored to the start time (fixed rate)
- One cycle at a time, the loop awaits each cycle
- A single stop event ends the loop

============================================================
OVERRUN POLICY
============================================================
If a cycle runs past one or more tick boundaries, the overdue
ticks are skipped and the next cycle starts at the next future
boundary. Skips are logged and counted, never queued.

============================================================
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable


class CycleScheduler:
    """Fixed-interval driver for an async job."""

    def __init__(
        self,
        interval_seconds: float,
        job: Callable[[], Awaitable[Any]],
        name: str = "collection",
    ) -> None:
        """
        Args:
            interval_seconds: Seconds between ticks
            job: Coroutine function run once per tick
            name: Label used in log lines
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._interval = float(interval_seconds)
        self._job = job
        self._name = name
        self._stop_event = asyncio.Event()
        self._logger = logging.getLogger("scheduler")

        self._running = False
        self._run_count = 0
        self._failure_count = 0
        self._skipped_ticks = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def run_count(self) -> int:
        return self._run_count

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def skipped_ticks(self) -> int:
        return self._skipped_ticks

    def stop(self) -> None:
        """Request the loop to exit. Safe to call more than once."""
        if not self._stop_event.is_set():
            self._logger.info(f"Stop requested for {self._name} scheduler")
        self._stop_event.set()

    async def run_forever(self) -> None:
        """Run the job every interval until stop() is called."""
        loop = asyncio.get_running_loop()
        next_run = loop.time() + self._interval
        self._running = True

        self._logger.info(
            f"Scheduler started | job={self._name} interval={self._interval:.0f}s"
        )

        try:
            while not self._stop_event.is_set():
                if await self._wait_until(next_run):
                    break

                self._run_count += 1
                try:
                    await self._job()
                except Exception as e:
                    self._failure_count += 1
                    self._logger.error(f"Cycle error in {self._name}: {e}", exc_info=True)

                next_run += self._interval
                now = loop.time()
                if now > next_run:
                    missed = int((now - next_run) // self._interval) + 1
                    next_run += missed * self._interval
                    self._skipped_ticks += missed
                    self._logger.warning(
                        f"Cycle overran the interval, skipped {missed} tick(s)"
                    )
        finally:
            self._running = False
            self._logger.info(f"Scheduler stopped | runs={self._run_count}")

    async def _wait_until(self, deadline: float) -> bool:
        """Sleep until ``deadline`` (loop time). Returns True if stopped meanwhile."""
        timeout = deadline - asyncio.get_running_loop().time()
        if timeout <= 0:
            return self._stop_event.is_set()
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
