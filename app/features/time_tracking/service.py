"""Business logic behind the timers API"""
import asyncio
import logging
from typing import AsyncIterator, Optional

from .display import format_duration, format_remaining, hours_to_duration, progress_percent, status_label
from .domain import TimerPhase
from .registry import TimerRegistry
from .schemas import StopTimerResponse, TimerListResponse, TimerView

logger = logging.getLogger(__name__)

HEARTBEAT_TICKS = 5


class TimeTrackingService:
    """Turns registry operations into the views the dashboard renders"""

    def __init__(self, registry: TimerRegistry):
        self.registry = registry

    def view(self, task_id: str) -> TimerView:
        """Build the view for a task; a task without a timer shows as idle"""
        state = self.registry.query(task_id)
        if state is None:
            return TimerView(
                task_id=task_id,
                phase=TimerPhase.IDLE,
                status_label=status_label(TimerPhase.IDLE),
                elapsed=format_duration(0),
                elapsed_seconds=0,
            )

        elapsed = self.registry.elapsed(task_id)
        remaining = self.registry.remaining(task_id)
        return TimerView(
            task_id=state.task_id,
            phase=state.phase,
            status_label=status_label(state.phase),
            elapsed=format_duration(elapsed),
            elapsed_seconds=int(elapsed.total_seconds()),
            remaining=format_remaining(remaining) if remaining is not None else None,
            remaining_seconds=int(remaining.total_seconds()) if remaining is not None else None,
            progress_percent=progress_percent(elapsed, state.estimated_target),
            entry_id=state.entry_ref,
        )

    def list_views(self) -> TimerListResponse:
        views = [self.view(state.task_id) for state in self.registry.snapshots()]
        return TimerListResponse(timers=views, count=len(views))

    async def start(self, task_id: str, estimated_hours: Optional[float] = None) -> TimerView:
        state = await self.registry.start(task_id, hours_to_duration(estimated_hours))
        return self.view(state.task_id if state else task_id)

    def pause(self, task_id: str) -> TimerView:
        self.registry.pause(task_id)
        return self.view(task_id)

    def resume(self, task_id: str) -> TimerView:
        self.registry.resume(task_id)
        return self.view(task_id)

    async def stop(self, task_id: str, mark_completed: bool = False) -> StopTimerResponse:
        final = await self.registry.stop(task_id, mark_completed=mark_completed)
        if final is None:
            return StopTimerResponse(
                task_id=task_id,
                stopped=False,
                elapsed=format_duration(0),
                elapsed_seconds=0,
                message=f"No timer running for task {task_id}",
            )
        return StopTimerResponse(
            task_id=task_id,
            stopped=True,
            elapsed=format_duration(final),
            elapsed_seconds=int(final.total_seconds()),
            message=f"Timer for task {task_id} stopped after {format_duration(final)}",
        )

    async def stream(self) -> AsyncIterator[str]:
        """
        Server-sent events with the full timer list.

        Emits once on connect, then after every tick. While no timer runs the
        scheduler is dormant, so a heartbeat re-sends the list every few
        intervals to keep paused timers fresh on screen.
        """
        ticked = asyncio.Event()
        scheduler = self.registry.scheduler
        scheduler.add_listener(ticked.set)
        heartbeat = scheduler.interval_seconds * HEARTBEAT_TICKS
        try:
            while True:
                ticked.clear()
                yield f"data: {self.list_views().model_dump_json()}\n\n"
                try:
                    await asyncio.wait_for(ticked.wait(), timeout=heartbeat)
                except asyncio.TimeoutError:
                    pass
        finally:
            scheduler.remove_listener(ticked.set)
            logger.debug(f"Timer stream closed for user {self.registry.user_id}")
