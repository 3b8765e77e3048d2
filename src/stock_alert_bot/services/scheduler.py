"""Timer that fires alert cycles on a fixed interval, never overlapping."""
import asyncio
import logging
from collections.abc import Awaitable, Callable

from stock_alert_bot.schemas import AlertCycleReport

logger = logging.getLogger(__name__)


class AlertScheduler:
    """Fires ``cycle`` after an initial delay and then every ``interval_seconds``.

    A firing that arrives while the previous cycle is still running is skipped.
    Exceptions from a cycle are logged and never stop the loop.
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[AlertCycleReport]],
        interval_seconds: float,
        initial_delay_seconds: float = 0,
    ) -> None:
        self._cycle = cycle
        self._interval = interval_seconds
        self._initial_delay = initial_delay_seconds
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self._running_cycle: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cycle_in_progress(self) -> bool:
        return self._lock.locked()

    async def run_once(self) -> AlertCycleReport | None:
        """Run one cycle now; returns None (skipped) if a cycle is already running."""
        if self._lock.locked():
            logger.warning("Previous alert cycle still running; skipping this firing")
            return None
        async with self._lock:
            try:
                return await self._cycle()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Alert cycle raised")
                return None

    async def run_forever(self) -> None:
        if self._initial_delay > 0:
            await asyncio.sleep(self._initial_delay)
        while True:
            if self._running_cycle is not None and not self._running_cycle.done():
                logger.warning("Previous alert cycle still running; skipping this firing")
            else:
                self._running_cycle = asyncio.create_task(self.run_once(), name="alert-cycle")
            await asyncio.sleep(self._interval)

    async def start(self) -> None:
        if self.running:
            return
        logger.info(
            "Starting alert scheduler (every %ss, first run in %ss)",
            self._interval, self._initial_delay,
        )
        self._task = asyncio.create_task(self.run_forever(), name="alert-scheduler")

    async def stop(self) -> None:
        for attr in ("_task", "_running_cycle"):
            task = getattr(self, attr)
            if task is None:
                continue
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            setattr(self, attr, None)
