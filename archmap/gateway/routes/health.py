"""
Health route: GET /health.
"""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Liveness check for load balancers and uptime monitors."""
    return {"status": "healthy", "service": "archmap", "version": "0.1.0"}
