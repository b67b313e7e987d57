# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# Everything under /health is a public path, so these never need a token.
# =============================================================================

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth.dependencies import get_access_gate
from app.auth.gate import AccessGate
from app.config import settings
from lib.supabase_client import SupabaseClient

router = APIRouter()

VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    allowlist: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    approved_emails: int
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(gate: AccessGate = Depends(get_access_gate)):
    """
    Readiness check endpoint.

    Checks database connectivity and that the approved email list has
    been loaded. A list that failed its last refresh is reported as
    stale but the service keeps serving it.
    """
    checks = ChecksResponse(database="unknown", allowlist="unknown")

    # Check database
    try:
        await asyncio.to_thread(SupabaseClient.count_recipes)
        checks.database = "healthy"
    except Exception as e:
        checks.database = f"unhealthy: {str(e)[:50]}"

    # Check approved email list
    await gate.cache.ensure_fresh()
    if gate.cache.last_refreshed_at is None:
        checks.allowlist = "not loaded"
    elif gate.cache.consecutive_failures:
        checks.allowlist = f"stale: {gate.cache.consecutive_failures} failed refreshes"
    else:
        checks.allowlist = "healthy"

    all_healthy = checks.database == "healthy" and checks.allowlist == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        approved_emails=len(gate.cache.entries),
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
