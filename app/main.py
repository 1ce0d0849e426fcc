import logging
from app.config import settings

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from app.api.base import api_router  # noqa: E402
from app.features.time_tracking import SupabasePersistenceGateway, TimerSessionManager  # noqa: E402
from app.infra.supabase import RepositoryFactory, get_supabase_client  # noqa: E402

logger = logging.getLogger(__name__)


def build_gateway() -> SupabasePersistenceGateway:
    return SupabasePersistenceGateway(RepositoryFactory(get_supabase_client()))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.timer_sessions = TimerSessionManager(build_gateway)
    logger.info("Timer session manager ready")
    yield
    app.state.timer_sessions.shutdown()
    logger.info("Timer sessions shut down")


app = FastAPI(
    title="Time Tracking Backend API",
    description="Multi-task work timers with durable time entries",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Specify your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Time Tracking Backend API",
        "docs": "/docs",
        "version": "1.0.0"
    }
