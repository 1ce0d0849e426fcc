"""Timer registry - per-task timer state machines for one user"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from app.models.task import TaskStatus
from .clock import Clock, SystemClock
from .display import format_duration
from .domain import TimerPhase, TimerState
from .errors import TimerBusyError, ValidationError
from .gateway import PersistenceGateway
from .scheduler import TickScheduler

logger = logging.getLogger(__name__)


def _normalize_task_id(task_id: Optional[str]) -> str:
    """Every keyed operation looks timers up by the stripped id"""
    return str(task_id).strip() if task_id is not None else ""


class TimerRegistry:
    """
    Holds the RUNNING and PAUSED timers of one user, keyed by task id.

    start/stop commit to the registry only after the gateway call succeeds.
    While such a call is in flight the task is tracked as pending, so a
    duplicate start is ignored and a racing stop is rejected.
    pause/resume and all queries are in-memory and never fail.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        clock: Optional[Clock] = None,
        user_id: Optional[str] = None,
        tick_interval: Optional[float] = None,
    ):
        self._gateway = gateway
        self._clock = clock or SystemClock()
        self.user_id = user_id
        self._timers: Dict[str, TimerState] = {}
        self._pending: Dict[str, str] = {}  # task_id -> "start" | "stop"
        self.scheduler = TickScheduler(self.refresh, tick_interval)

    @property
    def clock(self) -> Clock:
        return self._clock

    def __contains__(self, task_id: str) -> bool:
        return _normalize_task_id(task_id) in self._timers

    def __len__(self) -> int:
        return len(self._timers)

    # ---- transitions ----

    async def start(self, task_id: str, estimated_target: Optional[timedelta] = None) -> Optional[TimerState]:
        """
        Start timing a task.

        Args:
            task_id: Task to time
            estimated_target: Optional budget used for remaining time

        Returns:
            Snapshot of the timer, or None when a start for this task is already
            in flight or the new timer was stopped before start returned

        Raises:
            ValidationError: No current user or empty task id
            PersistenceError: The time entry could not be created
        """
        task_id = self._validate_task_id(task_id)

        existing = self._timers.get(task_id)
        if existing is not None:
            logger.debug(f"Timer for task {task_id} already {existing.phase.value}; start ignored")
            return existing.model_copy()

        if task_id in self._pending:
            logger.info(f"Start for task {task_id} ignored: {self._pending[task_id]} in flight")
            return None

        if not self.user_id:
            raise ValidationError("No authenticated user; cannot start a timer")

        now = self._clock.now()
        self._pending[task_id] = "start"
        try:
            entry_id = await self._gateway.create_time_entry(task_id, self.user_id, now)
        finally:
            self._pending.pop(task_id, None)

        state = TimerState(
            task_id=task_id,
            phase=TimerPhase.RUNNING,
            start_anchor=now,
            estimated_target=estimated_target,
            entry_ref=entry_id,
        )
        self._timers[task_id] = state
        logger.info(f"Timer started for task {task_id} (entry {entry_id})")

        await self._set_task_status(task_id, TaskStatus.IN_PROGRESS.value)
        if self._timers.get(task_id) is not state:
            logger.info(f"Timer for task {task_id} was stopped while its status was updated")
            return None
        self.scheduler.start()
        return state.model_copy()

    def pause(self, task_id: str) -> Optional[TimerState]:
        """Pause a running timer; the closed segment moves into total_duration"""
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        if state is None or state.phase != TimerPhase.RUNNING:
            logger.debug(f"Pause ignored for task {task_id}")
            return state.model_copy() if state else None

        now = self._clock.now()
        session = state.session_at(now)
        state.total_duration += session
        state.current_session_duration = timedelta(0)
        state.phase = TimerPhase.PAUSED
        state.pause_anchor = now
        logger.info(f"Timer paused for task {task_id} at {format_duration(state.total_duration)}")
        return state.model_copy()

    def resume(self, task_id: str) -> Optional[TimerState]:
        """Resume a paused timer with a fresh start anchor"""
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        if state is None or state.phase != TimerPhase.PAUSED:
            logger.debug(f"Resume ignored for task {task_id}")
            return state.model_copy() if state else None

        now = self._clock.now()
        if state.pause_anchor is not None:
            state.accumulated_paused_duration += max(timedelta(0), now - state.pause_anchor)
        state.start_anchor = now
        state.current_session_duration = timedelta(0)
        state.phase = TimerPhase.RUNNING
        state.pause_anchor = None
        logger.info(f"Timer resumed for task {task_id}")

        self.scheduler.start()
        return state.model_copy()

    async def stop(self, task_id: str, mark_completed: bool = False) -> Optional[timedelta]:
        """
        Stop a timer and finalize its time entry.

        Args:
            task_id: Task whose timer to stop
            mark_completed: Also move the task to "completed" once the entry is closed

        Returns:
            Final counted duration, or None if no timer existed

        Raises:
            TimerBusyError: A start or stop for this task is still in flight
            PersistenceError / NotFoundError: Finalizing failed; the timer is kept
        """
        task_id = _normalize_task_id(task_id)
        if task_id in self._pending:
            raise TimerBusyError(task_id, self._pending[task_id])

        state = self._timers.get(task_id)
        if state is None:
            logger.debug(f"Stop ignored for task {task_id}: no timer")
            return None

        now = self._clock.now()
        state.current_session_duration = state.session_at(now)
        final = state.total_duration + state.current_session_duration

        self._pending[task_id] = "stop"
        try:
            await self._gateway.finalize_time_entry(state.entry_ref, now)
        except Exception as e:
            logger.error(f"Error stopping timer for task {task_id}; keeping it for retry: {e}")
            raise
        finally:
            self._pending.pop(task_id, None)

        self._timers.pop(task_id, None)
        logger.info(f"Timer stopped for task {task_id} after {format_duration(final)}")

        if mark_completed:
            await self._set_task_status(task_id, TaskStatus.COMPLETED.value)
        return final

    def adopt(self, state: TimerState) -> bool:
        """
        Insert a timer rebuilt from durable state.

        Returns:
            False when the task already has a timer or a start/stop in flight
        """
        if state.task_id in self._timers or state.task_id in self._pending:
            return False
        self._timers[state.task_id] = state
        if state.phase == TimerPhase.RUNNING:
            self.scheduler.start()
        return True

    def refresh(self) -> int:
        """Recompute every running timer's session from its anchor; returns how many are running"""
        now = self._clock.now()
        running = 0
        for state in self._timers.values():
            if state.phase == TimerPhase.RUNNING:
                state.current_session_duration = state.session_at(now)
                running += 1
        return running

    def clear(self) -> None:
        """Forget every timer and stop ticking. Durable entries are left open."""
        self.scheduler.stop()
        self._timers.clear()

    # ---- queries ----

    def query(self, task_id: str) -> Optional[TimerState]:
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        return state.model_copy() if state else None

    def snapshots(self) -> List[TimerState]:
        return [state.model_copy() for state in self._timers.values()]

    def elapsed(self, task_id: str) -> timedelta:
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        if state is None:
            return timedelta(0)
        return state.elapsed_at(self._clock.now())

    def formatted_elapsed(self, task_id: str) -> str:
        return format_duration(self.elapsed(task_id))

    def remaining(self, task_id: str) -> Optional[timedelta]:
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        if state is None or state.estimated_target is None:
            return None
        return max(timedelta(0), state.estimated_target - state.elapsed_at(self._clock.now()))

    def is_running(self, task_id: str) -> bool:
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        return state is not None and state.phase == TimerPhase.RUNNING

    def is_paused(self, task_id: str) -> bool:
        task_id = _normalize_task_id(task_id)
        state = self._timers.get(task_id)
        return state is not None and state.phase == TimerPhase.PAUSED

    def is_pending(self, task_id: str) -> bool:
        return _normalize_task_id(task_id) in self._pending

    # ---- helpers ----

    @staticmethod
    def _validate_task_id(task_id: str) -> str:
        task_id = _normalize_task_id(task_id)
        if not task_id:
            raise ValidationError("task_id is required")
        return task_id

    async def _set_task_status(self, task_id: str, status: str) -> None:
        # The timer is kept even if the task row could not be updated
        try:
            await self._gateway.update_task_status(task_id, status)
        except Exception as e:
            logger.warning(f"Timer for task {task_id} kept, but status update to {status} failed: {e}")
