"""Task model (only the columns the time-tracking engine reads or writes)"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status values set by the timer engine"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskUpdate(BaseModel):
    """Task update model - all fields optional"""
    status: Optional[str] = None
    completed_at: Optional[datetime] = None


class Task(BaseModel):
    """Task row from database"""
    id: str  # UUID as string
    title: Optional[str] = None
    status: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
