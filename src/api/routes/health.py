"""Health check endpoints for the DirectoryHub API.

Provides liveness and readiness probes plus a store connectivity check.
"""

from datetime import datetime, timezone
import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.api.dependencies import get_store
from src.api.models import HealthCheckResponse, HealthStatus
from src.store.client import EntityStore
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

API_VERSION = "0.1.0"

# Track server start time for uptime calculation
_server_start_time: Optional[float] = None


def set_server_start_time() -> None:
    """Set the server start time. Called on application startup."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime_seconds() -> Optional[float]:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return None
    return time.time() - _server_start_time


async def check_store_health(store: EntityStore) -> HealthStatus:
    """Check Supabase connectivity with a one-row read, off the event loop."""
    start_time = time.time()
    result = await run_in_threadpool(
        store.execute, store.table(Entity.STATES.value).select("id").limit(1)
    )
    latency = round((time.time() - start_time) * 1000, 2)

    if result.ok:
        return HealthStatus(
            status="healthy",
            latency_ms=latency,
            message="Connected to Supabase",
        )

    logger.error("store_health_check_failed", kind=result.kind.value, detail=result.detail)
    return HealthStatus(
        status="unhealthy",
        latency_ms=latency,
        message=f"Supabase query failed: {result.detail[:100]}",
    )


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health Check",
    description="Check the health status of the API and its store.",
)
async def health_check(
    store: EntityStore = Depends(get_store),
) -> HealthCheckResponse:
    services = {"supabase": await check_store_health(store)}

    return HealthCheckResponse(
        status=services["supabase"].status,
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
        services=services,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check for container orchestration.",
)
async def liveness() -> dict:
    """Returns 200 if the process is serving requests."""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness(
    store: EntityStore = Depends(get_store),
):
    """Returns 200 only if the store answers, 503 otherwise."""
    status = await check_store_health(store)

    if status.status == "unhealthy":
        return JSONResponse(
            status_code=503,
            content={"error": "Service not ready: database unavailable"},
        )

    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
