"""Domain models for the application"""
from .task import Task, TaskStatus, TaskUpdate
from .time_entry import OpenTimeEntry, TaskTimeSummary, TimeEntry, TimeEntryCreate, TimeEntryUpdate

__all__ = [
    'Task', 'TaskStatus', 'TaskUpdate',
    'TimeEntry', 'TimeEntryCreate', 'TimeEntryUpdate',
    'OpenTimeEntry', 'TaskTimeSummary',
]
