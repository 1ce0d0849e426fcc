"""Timers API endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from typing import List, Optional

from app.middleware.auth import get_current_user_id
from app.features.time_tracking.errors import (
    NotFoundError,
    PersistenceError,
    TimerBusyError,
    TimeTrackingError,
    ValidationError,
)
from app.features.time_tracking.schemas import (
    StartTimerRequest,
    StopTimerRequest,
    StopTimerResponse,
    TimeSummaryResponse,
    TimerListResponse,
    TimerView,
)
from app.features.time_tracking.service import TimeTrackingService
from app.features.time_tracking.sessions import TimerSessionManager

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/timers", tags=["timers"])


def get_session_manager(request: Request) -> TimerSessionManager:
    """Session manager created in the app lifespan"""
    return request.app.state.timer_sessions


def _http_error(e: TimeTrackingError) -> HTTPException:
    if isinstance(e, TimerBusyError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PersistenceError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


async def get_service(
    user_id: str = Depends(get_current_user_id),
    sessions: TimerSessionManager = Depends(get_session_manager),
) -> TimeTrackingService:
    """Service bound to the caller's session; the first call reconciles open entries"""
    try:
        registry = await sessions.get_session(user_id)
    except TimeTrackingError as e:
        logger.error(f"Could not open timer session for user {user_id}: {e}")
        raise _http_error(e)
    return TimeTrackingService(registry)


@router.post("/session", response_model=TimerListResponse)
async def begin_session(service: TimeTrackingService = Depends(get_service)):
    """
    Begin (or rejoin) the caller's timer session.

    Timers left running by a previous session are restored from their open
    time entries before the list is returned.
    """
    return service.list_views()


@router.delete("/session")
async def end_session(
    user_id: str = Depends(get_current_user_id),
    sessions: TimerSessionManager = Depends(get_session_manager),
):
    """Forget the caller's in-memory timers. Open time entries stay open."""
    ended = sessions.end_session(user_id)
    return {"ended": ended}


@router.get("", response_model=TimerListResponse)
async def list_timers(service: TimeTrackingService = Depends(get_service)):
    return service.list_views()


@router.get("/summary", response_model=TimeSummaryResponse)
async def get_time_summary(
    task_ids: List[str] = Query(..., description="Tasks to report spent seconds for"),
    sessions: TimerSessionManager = Depends(get_session_manager),
    user_id: str = Depends(get_current_user_id),
):
    """Spent seconds per task, counting open entries up to now"""
    try:
        spent = await sessions.gateway.get_time_summary(task_ids)
    except TimeTrackingError as e:
        raise _http_error(e)
    return TimeSummaryResponse(spent_seconds=spent)


@router.get("/stream")
async def stream_timers(service: TimeTrackingService = Depends(get_service)):
    """Live timer list as server-sent events, one event per tick"""
    return StreamingResponse(
        service.stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


@router.get("/{task_id}", response_model=TimerView)
async def get_timer(task_id: str, service: TimeTrackingService = Depends(get_service)):
    return service.view(task_id)


@router.post("/{task_id}/start", response_model=TimerView)
async def start_timer(
    task_id: str,
    request: Optional[StartTimerRequest] = None,
    service: TimeTrackingService = Depends(get_service),
):
    """
    Start timing a task and move it to in_progress.

    Raises:
        400: No user or invalid task id
        502: The time entry could not be created (no timer is started)
    """
    estimated_hours = request.estimated_hours if request else None
    try:
        return await service.start(task_id, estimated_hours)
    except TimeTrackingError as e:
        raise _http_error(e)


@router.post("/{task_id}/pause", response_model=TimerView)
async def pause_timer(task_id: str, service: TimeTrackingService = Depends(get_service)):
    return service.pause(task_id)


@router.post("/{task_id}/resume", response_model=TimerView)
async def resume_timer(task_id: str, service: TimeTrackingService = Depends(get_service)):
    return service.resume(task_id)


@router.post("/{task_id}/stop", response_model=StopTimerResponse)
async def stop_timer(
    task_id: str,
    request: Optional[StopTimerRequest] = None,
    service: TimeTrackingService = Depends(get_service),
):
    """
    Stop a timer and close its time entry.

    Raises:
        404: The time entry no longer exists (timer kept)
        409: A start or stop for this task is still in flight
        502: The store rejected the update (timer kept, retry is safe)
    """
    mark_completed = request.mark_completed if request else False
    try:
        return await service.stop(task_id, mark_completed=mark_completed)
    except TimeTrackingError as e:
        raise _http_error(e)
