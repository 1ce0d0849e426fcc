"""Rebuild running timers from time entries left open by a previous session"""
import logging
from datetime import timedelta
from typing import List

from .domain import TimerPhase, TimerState
from .errors import ValidationError
from .gateway import PersistenceGateway
from .registry import TimerRegistry

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Runs once per user session.

    Each open entry becomes a RUNNING timer anchored at the entry's
    started_at. Pauses taken before the restart are not known to the store,
    so restored timers count the whole span since started_at.
    """

    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def reconcile(self, registry: TimerRegistry) -> List[str]:
        """
        Restore open entries of the registry's user.

        Returns:
            Task ids whose timers were restored

        Raises:
            ValidationError: The registry has no user
            PersistenceError: Open entries could not be listed
        """
        if not registry.user_id:
            raise ValidationError("No authenticated user; cannot reconcile timers")

        entries = await self._gateway.list_open_time_entries(registry.user_id)
        now = registry.clock.now()
        restored: List[str] = []
        seen = set()

        for entry in entries:
            if entry.task_id in seen:
                logger.warning(
                    f"Task {entry.task_id} has more than one open time entry; skipping entry {entry.entry_id}"
                )
                continue

            seen.add(entry.task_id)

            state = TimerState(
                task_id=entry.task_id,
                phase=TimerPhase.RUNNING,
                start_anchor=entry.started_at,
                current_session_duration=max(timedelta(0), now - entry.started_at),
                estimated_target=entry.estimated_target,
                entry_ref=entry.entry_id,
            )
            if registry.adopt(state):
                restored.append(entry.task_id)
            else:
                logger.debug(f"Task {entry.task_id} already tracked; open entry {entry.entry_id} not restored")

        logger.info(f"Reconciled {len(restored)} running timer(s) for user {registry.user_id}")
        return restored
