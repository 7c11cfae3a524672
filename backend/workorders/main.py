"""FastAPI application entrypoint and router wiring for the work-order backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from workorders.api.confirmations import router as confirmations_router
from workorders.api.history import router as history_router
from workorders.api.settings import router as settings_router
from workorders.api.settings import sweeps_router
from workorders.api.tasks import router as tasks_router
from workorders.core.config import settings
from workorders.core.error_handling import install_error_handling
from workorders.core.logging import configure_logging, get_logger
from workorders.db.session import init_db
from workorders.schemas.health import HealthStatusResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

configure_logging()
logger = get_logger(__name__)
OPENAPI_TAGS = [
    {
        "name": "health",
        "description": "Service liveness/readiness probes used by infrastructure and runtime checks.",
    },
    {
        "name": "tasks",
        "description": "Task CRUD, status transitions, approval and daily/overdue views.",
    },
    {
        "name": "confirmations",
        "description": "Token-scoped links letting an assignee view, acknowledge and update tasks.",
    },
    {
        "name": "settings",
        "description": "Workday start/end boundaries used by timing and sweeps.",
    },
    {
        "name": "sweeps",
        "description": "On-demand runs of the end-of-workday and daily schedule sweeps.",
    },
    {
        "name": "history",
        "description": "Completed task history with punctuality statistics.",
    },
]
_HEALTH_RESPONSES = {
    status.HTTP_200_OK: {
        "description": "Service is alive.",
        "content": {"application/json": {"example": {"ok": True}}},
    }
}


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize application resources before serving requests."""
    logger.info(
        "app.lifecycle.starting",
        extra={
            "environment": settings.environment,
            "db_auto_migrate": settings.db_auto_migrate,
            "operational_timezone": settings.operational_timezone,
        },
    )
    await init_db()
    logger.info("app.lifecycle.started")
    try:
        yield
    finally:
        logger.info("app.lifecycle.stopped")


app = FastAPI(
    title="Work Orders API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("app.cors.enabled", extra={"origins_count": len(origins)})
else:
    logger.info("app.cors.disabled")

install_error_handling(app)


@app.get("/health", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def health() -> HealthStatusResponse:
    """Lightweight liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get("/healthz", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def healthz() -> HealthStatusResponse:
    """Alias liveness probe endpoint for platform compatibility."""
    return HealthStatusResponse(ok=True)


@app.get("/readyz", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def readyz() -> HealthStatusResponse:
    """Readiness probe endpoint for service orchestration checks."""
    return HealthStatusResponse(ok=True)


api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(tasks_router)
api_v1.include_router(confirmations_router)
api_v1.include_router(settings_router)
api_v1.include_router(sweeps_router)
api_v1.include_router(history_router)
app.include_router(api_v1)

logger.debug("app.routes.registered", extra={"count": len(app.routes)})
