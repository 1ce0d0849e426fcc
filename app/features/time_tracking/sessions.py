"""Per-user timer sessions"""
import asyncio
import logging
from typing import Callable, Dict, Optional

from .clock import Clock, SystemClock
from .gateway import PersistenceGateway
from .reconciler import Reconciler
from .registry import TimerRegistry

logger = logging.getLogger(__name__)


class TimerSessionManager:
    """
    Owns one TimerRegistry per authenticated user.

    The first get_session() for a user builds the registry and reconciles it
    with the store. Concurrent first requests for the same user wait on a
    per-user lock, so reconciliation runs once.
    """

    def __init__(
        self,
        gateway_factory: Callable[[], PersistenceGateway],
        clock: Optional[Clock] = None,
        tick_interval: Optional[float] = None,
    ):
        self._gateway_factory = gateway_factory
        self._gateway: Optional[PersistenceGateway] = None
        self._clock = clock or SystemClock()
        self._tick_interval = tick_interval
        self._registries: Dict[str, TimerRegistry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def gateway(self) -> PersistenceGateway:
        # Built lazily so the app imports without Supabase credentials
        if self._gateway is None:
            self._gateway = self._gateway_factory()
        return self._gateway

    @property
    def active_users(self) -> int:
        return len(self._registries)

    async def get_session(self, user_id: str) -> TimerRegistry:
        """Return the user's registry, creating and reconciling it on first use"""
        registry = self._registries.get(user_id)
        if registry is not None:
            return registry

        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            registry = self._registries.get(user_id)
            if registry is not None:
                return registry

            registry = TimerRegistry(
                self.gateway,
                clock=self._clock,
                user_id=user_id,
                tick_interval=self._tick_interval,
            )
            # A failed reconcile leaves no session behind; the next request retries
            await Reconciler(self.gateway).reconcile(registry)
            self._registries[user_id] = registry
            logger.info(f"Timer session started for user {user_id}")
            return registry

    def end_session(self, user_id: str) -> bool:
        """Drop a user's registry; open entries are picked up again next session"""
        # Locks outlive sessions; a get_session still reconciling keeps holding its lock
        registry = self._registries.pop(user_id, None)
        if registry is None:
            return False
        registry.clear()
        logger.info(f"Timer session ended for user {user_id}")
        return True

    def shutdown(self) -> None:
        for user_id in list(self._registries):
            self.end_session(user_id)
