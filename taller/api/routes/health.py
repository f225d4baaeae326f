"""Liveness and database readiness endpoints."""

import time

from fastapi import APIRouter

from taller.application.dto.responses import HealthResponse
from taller.config import get_settings
from taller.infrastructure.storage.sqlite import get_pool

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        components={"uptime_seconds": round(time.monotonic() - _started_at, 2)},
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round trip a trivial query through the pool and report its latency."""
    probe: dict = {"name": "sqlite"}
    try:
        pool = await get_pool()
        started = time.perf_counter()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
        probe.update(available=True, latency_ms=round((time.perf_counter() - started) * 1000, 2))
    except Exception as e:
        probe.update(available=False, error=str(e))

    return HealthResponse(
        status="healthy" if probe["available"] else "unhealthy",
        version=get_settings().app_version,
        components={"database": probe},
    )
