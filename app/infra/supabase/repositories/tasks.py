"""Task repository"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel
from supabase import Client  # type: ignore

from app.config import settings
from app.models.task import Task, TaskStatus, TaskUpdate
from app.models.time_entry import TaskTimeSummary

from .base import BaseRepository


class TaskRepository(BaseRepository[Task, BaseModel, TaskUpdate]):
    """Repository for the task columns touched by time tracking"""

    def __init__(self, client: Client, table_name: Optional[str] = None, summary_view: Optional[str] = None):
        super().__init__(client, table_name or settings.tasks_table, Task)
        self._summary_view = summary_view or settings.time_summary_view

    async def update_status(self, task_id: str, status: str) -> Optional[Task]:
        """Set a task's status; marking it completed also stamps completed_at"""
        if status == TaskStatus.COMPLETED.value:
            update_data = TaskUpdate(status=status, completed_at=datetime.now(timezone.utc))
        else:
            update_data = TaskUpdate(status=status)
        return await self.update(task_id, update_data)

    async def find_time_summary(self, task_ids: List[str]) -> List[TaskTimeSummary]:
        """Spent seconds per task from the summary view

        Args:
            task_ids: Tasks to summarize

        Returns:
            One row per task that exists in the view
        """
        if not task_ids:
            return []
        response = (
            self._client.table(self._summary_view)
            .select("task_id, spent_seconds")
            .in_("task_id", task_ids)
            .execute()
        )
        return [TaskTimeSummary(**row) for row in response.data or []]
