"""
Tick scheduler.

One shared periodic driver for every timer in a registry:
- every interval it calls the registry's refresh callback,
- then notifies tick listeners (live displays),
- and goes dormant as soon as no timer is running.

The registry restarts it from start/resume. Tests can call tick() directly
instead of waiting on the event loop.
"""
import asyncio
import logging
from typing import Callable, List, Optional

from app.config import settings

logger = logging.getLogger(__name__)

TickListener = Callable[[], None]


class TickScheduler:
    def __init__(self, on_tick: Callable[[], int], interval_seconds: Optional[float] = None):
        """
        Args:
            on_tick: Recomputes running timers and returns how many are still running
            interval_seconds: Tick period; defaults to TIMER_TICK_SECONDS
        """
        self._on_tick = on_tick
        self._interval = interval_seconds if interval_seconds is not None else settings.timer_tick_seconds
        self._task: Optional[asyncio.Task] = None
        self._active = False
        self._listeners: List[TickListener] = []
        self.tick_count = 0

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def add_listener(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Arm the driver. Without a running event loop only manual ticks advance it."""
        if self._active and self._task is not None:
            return
        self._active = True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; tick driver armed for manual ticks")
            return

        self._task = loop.create_task(self._run())
        logger.debug(f"Tick driver started (interval={self._interval}s)")

    def stop(self) -> None:
        """Stop the driver and cancel its background task"""
        task = self._task
        self._halt()
        if task is not None and not task.done():
            task.cancel()

    def tick(self) -> bool:
        """
        Run one tick.

        Returns:
            True while at least one timer is still running
        """
        self.tick_count += 1
        running = self._on_tick()

        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Tick listener failed")

        if running <= 0:
            logger.debug("No running timers; tick driver going dormant")
            self._halt()
            return False
        return True

    def _halt(self) -> None:
        self._active = False
        self._task = None

    async def _run(self) -> None:
        me = asyncio.current_task()
        while self._active and self._task is me:
            await asyncio.sleep(self._interval)
            # start() may have replaced this driver while it slept
            if not self._active or self._task is not me:
                break
            try:
                self.tick()
            except Exception:
                logger.exception("Tick failed")
