# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.dependencies import StoreDep
from lib.store import StoreError
from lib.utils import isoformat_utc, utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    store: str
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=isoformat_utc(utc_now()),
        environment=request.app.state.settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(store: StoreDep):
    """
    Readiness check endpoint.

    Runs a point lookup against the store.
    """
    try:
        await store.fetch_by_key("categories", 1)
        store_status = "healthy"
    except StoreError as e:
        logger.warning(f"Readiness check failed: {e}")
        store_status = "unhealthy"

    return ReadinessResponse(
        status="ready" if store_status == "healthy" else "degraded",
        store=store_status,
        timestamp=isoformat_utc(utc_now()),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=isoformat_utc(utc_now()),
    )
