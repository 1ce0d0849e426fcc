"""Domain models for time tracking"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class TimerPhase(str, Enum):
    """Timer phase. IDLE and STOPPED timers are never held in a registry."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TimerState(BaseModel):
    """In-memory state of one task's work timer"""
    task_id: str
    phase: TimerPhase = TimerPhase.RUNNING
    start_anchor: datetime  # start of the current running segment
    pause_anchor: Optional[datetime] = None  # only while PAUSED
    accumulated_paused_duration: timedelta = timedelta(0)
    current_session_duration: timedelta = timedelta(0)
    total_duration: timedelta = timedelta(0)  # closed segments only
    estimated_target: Optional[timedelta] = None
    entry_ref: str

    @property
    def is_running(self) -> bool:
        return self.phase == TimerPhase.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.phase == TimerPhase.PAUSED

    def session_at(self, now: datetime) -> timedelta:
        """Elapsed time of the current segment as of `now`; frozen while paused"""
        if self.phase != TimerPhase.RUNNING:
            return self.current_session_duration
        # Never report less than already shown, even if the wall clock stepped back
        return max(self.current_session_duration, now - self.start_anchor)

    def elapsed_at(self, now: datetime) -> timedelta:
        """Total counted running time as of `now`"""
        return self.total_duration + self.session_at(now)
