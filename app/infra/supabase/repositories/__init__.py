"""Repository factory and exports"""
from typing import Optional

from supabase import Client
from .tasks import TaskRepository
from .time_entries import TimeEntryRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._tasks: Optional[TaskRepository] = None
        self._time_entries: Optional[TimeEntryRepository] = None

    @property
    def tasks(self) -> TaskRepository:
        """Get task repository"""
        if self._tasks is None:
            self._tasks = TaskRepository(self._client)
        return self._tasks

    @property
    def time_entries(self) -> TimeEntryRepository:
        """Get time entry repository"""
        if self._time_entries is None:
            self._time_entries = TimeEntryRepository(self._client)
        return self._time_entries


__all__ = [
    'RepositoryFactory',
    'TaskRepository',
    'TimeEntryRepository',
]
