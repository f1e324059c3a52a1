"""Health Probe - liveness endpoint.

Invariants:
    - GET /api/v1/health/ always returns 200 if the process is up
"""

from fastapi import APIRouter, status

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    return {
        "status": "healthy",
        "service": "dynamic-rpc",
        "version": "1.0.0",
    }
