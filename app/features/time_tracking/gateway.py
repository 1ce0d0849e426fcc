"""Persistence gateway for time entries and task status"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from app.infra.supabase.repositories import RepositoryFactory
from app.models.time_entry import OpenTimeEntry, TimeEntryCreate
from app.utils.datetime_helper import parse_timestamp
from .display import hours_to_duration
from .errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Durable store the timer engine reads from and writes to"""

    async def create_time_entry(self, task_id: str, user_id: str, started_at: datetime) -> str: ...

    async def finalize_time_entry(self, entry_id: str, ended_at: datetime) -> None: ...

    async def list_open_time_entries(self, user_id: str) -> List[OpenTimeEntry]: ...

    async def update_task_status(self, task_id: str, status: str) -> None: ...

    async def get_time_summary(self, task_ids: List[str]) -> Dict[str, int]: ...


class SupabasePersistenceGateway:
    """
    PersistenceGateway backed by Supabase tables.

    Every failure coming out of the Supabase client is re-raised as
    PersistenceError so callers only deal with the engine's taxonomy.
    """

    def __init__(self, repositories: RepositoryFactory):
        self._repos = repositories

    async def create_time_entry(self, task_id: str, user_id: str, started_at: datetime) -> str:
        try:
            entry = await self._repos.time_entries.create(
                TimeEntryCreate(task_id=task_id, user_id=user_id, started_at=started_at)
            )
        except Exception as e:
            logger.error(f"Error creating time entry for task {task_id}: {e}")
            raise PersistenceError(f"Could not create time entry for task {task_id}") from e

        logger.info(f"Time entry {entry.id} opened for task {task_id} by user {user_id}")
        return entry.id

    async def finalize_time_entry(self, entry_id: str, ended_at: datetime) -> None:
        try:
            entry = await self._repos.time_entries.close(entry_id, ended_at)
        except Exception as e:
            logger.error(f"Error finalizing time entry {entry_id}: {e}")
            raise PersistenceError(f"Could not finalize time entry {entry_id}") from e

        if entry is None:
            raise NotFoundError(entry_id)

        logger.info(f"Time entry {entry_id} closed at {ended_at.isoformat()}")

    async def list_open_time_entries(self, user_id: str) -> List[OpenTimeEntry]:
        try:
            rows = await self._repos.time_entries.find_open_by_user(user_id)
        except Exception as e:
            logger.error(f"Error listing open time entries for user {user_id}: {e}")
            raise PersistenceError(f"Could not list open time entries for user {user_id}") from e

        entries = []
        for row in rows:
            task = row.get("tasks") or {}
            estimated_hours: Optional[float] = task.get("estimated_hours")
            entries.append(
                OpenTimeEntry(
                    entry_id=str(row["id"]),
                    task_id=str(row["task_id"]),
                    started_at=parse_timestamp(row["started_at"]),
                    estimated_target=hours_to_duration(estimated_hours),
                )
            )
        return entries

    async def update_task_status(self, task_id: str, status: str) -> None:
        try:
            task = await self._repos.tasks.update_status(task_id, status)
        except Exception as e:
            raise PersistenceError(f"Could not set task {task_id} to {status}") from e

        if task is None:
            raise NotFoundError(task_id, resource="Task")

    async def get_time_summary(self, task_ids: List[str]) -> Dict[str, int]:
        try:
            rows = await self._repos.tasks.find_time_summary(task_ids)
        except Exception as e:
            logger.error(f"Error reading time summary: {e}")
            raise PersistenceError("Could not read time summary") from e

        return {row.task_id: row.spent_seconds or 0 for row in rows}
