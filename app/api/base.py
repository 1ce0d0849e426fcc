from fastapi import APIRouter
from app.api import health
from app.features import time_tracking

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(time_tracking.router)
