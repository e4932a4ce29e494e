"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /api/health always returns 200 if the process is up (liveness)
    - GET /api/health/ready returns 503 if the external API is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from rihigo_web.infrastructure.api_client import BackendApiClient, get_api_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "rihigo-web", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(client: BackendApiClient = Depends(get_api_client)):
    """Readiness probe, including external API connectivity."""
    api_ok = await client.health()
    if not api_ok:
        logger.warning("Readiness check failed: external API unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "api_unavailable"},
        )
    return {"status": "ready", "checks": {"api": "healthy"}}
