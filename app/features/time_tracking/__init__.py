"""Time tracking feature module"""

from app.features.time_tracking.api import router
from app.features.time_tracking.clock import Clock, SystemClock
from app.features.time_tracking.domain import TimerPhase, TimerState
from app.features.time_tracking.errors import (
    NotFoundError,
    PersistenceError,
    TimerBusyError,
    TimeTrackingError,
    ValidationError,
)
from app.features.time_tracking.gateway import PersistenceGateway, SupabasePersistenceGateway
from app.features.time_tracking.reconciler import Reconciler
from app.features.time_tracking.registry import TimerRegistry
from app.features.time_tracking.scheduler import TickScheduler
from app.features.time_tracking.service import TimeTrackingService
from app.features.time_tracking.sessions import TimerSessionManager

__all__ = [
    "router",
    "Clock",
    "SystemClock",
    "TimerPhase",
    "TimerState",
    "TimeTrackingError",
    "ValidationError",
    "TimerBusyError",
    "PersistenceError",
    "NotFoundError",
    "PersistenceGateway",
    "SupabasePersistenceGateway",
    "Reconciler",
    "TimerRegistry",
    "TickScheduler",
    "TimeTrackingService",
    "TimerSessionManager",
]
