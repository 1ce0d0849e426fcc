"""Time entry repository"""
from datetime import datetime
from typing import List, Optional, Dict, Any

from supabase import Client  # type: ignore

from app.config import settings
from app.models.time_entry import TimeEntry, TimeEntryCreate, TimeEntryUpdate

from .base import BaseRepository


class TimeEntryRepository(BaseRepository[TimeEntry, TimeEntryCreate, TimeEntryUpdate]):
    """Repository for task_time_entries"""

    def __init__(self, client: Client, table_name: Optional[str] = None):
        super().__init__(client, table_name or settings.time_entries_table, TimeEntry)

    async def close(self, entry_id: str, ended_at: datetime) -> Optional[TimeEntry]:
        """Set ended_at on an entry

        Returns:
            The closed entry, or None if no row with that id exists
        """
        return await self.update(entry_id, TimeEntryUpdate(ended_at=ended_at))

    async def find_open_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Find entries without ended_at for a user, joined with their task's estimate

        Returns raw rows shaped like
        {"id", "task_id", "started_at", "tasks": {"id", "estimated_hours"}}
        """
        response = (
            self._table()
            .select("id, task_id, started_at, tasks!inner(id, estimated_hours)")
            .eq("user_id", user_id)
            .is_("ended_at", "null")
            .order("started_at", desc=False)
            .execute()
        )
        return response.data or []
