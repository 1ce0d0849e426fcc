"""Request and response schemas for the timers API"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .domain import TimerPhase


class StartTimerRequest(BaseModel):
    """Request model for starting a timer"""
    estimated_hours: Optional[float] = Field(None, gt=0)


class StopTimerRequest(BaseModel):
    """Request model for stopping a timer"""
    mark_completed: bool = False


class TimerView(BaseModel):
    """What the dashboard renders for one task's timer"""
    task_id: str
    phase: TimerPhase
    status_label: str
    elapsed: str  # HH:MM:SS
    elapsed_seconds: int
    remaining: Optional[str] = None  # HH:MM:SS or "Overdue"
    remaining_seconds: Optional[int] = None
    progress_percent: Optional[int] = None
    entry_id: Optional[str] = None


class TimerListResponse(BaseModel):
    timers: List[TimerView]
    count: int


class StopTimerResponse(BaseModel):
    """Response model for a stopped timer"""
    task_id: str
    stopped: bool
    elapsed: str
    elapsed_seconds: int
    message: str


class TimeSummaryResponse(BaseModel):
    """Spent seconds per task, across all users' entries"""
    spent_seconds: Dict[str, int]
