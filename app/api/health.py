"""Health check endpoints"""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check(request: Request):
    """Basic health check with the number of live timer sessions"""
    sessions = getattr(request.app.state, "timer_sessions", None)
    return {
        "status": "healthy",
        "service": "time-tracking-backend",
        "active_sessions": sessions.active_users if sessions else 0,
    }
