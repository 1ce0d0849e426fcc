"""Time entry models backed by the task_time_entries table"""
from datetime import datetime, timedelta
from typing import Optional
from pydantic import BaseModel


class TimeEntryCreate(BaseModel):
    """Time entry creation model"""
    task_id: str
    user_id: str
    started_at: datetime


class TimeEntryUpdate(BaseModel):
    """Time entry update model - all fields optional"""
    ended_at: Optional[datetime] = None


class TimeEntry(BaseModel):
    """Complete time entry row from database"""
    id: str  # UUID as string
    task_id: str
    user_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OpenTimeEntry(BaseModel):
    """An entry left open by a previous session, with the owning task's estimate"""
    entry_id: str
    task_id: str
    started_at: datetime
    estimated_target: Optional[timedelta] = None


class TaskTimeSummary(BaseModel):
    """Row of the per-task spent-seconds view"""
    task_id: str
    spent_seconds: Optional[int] = None
