"""
Todo RBAC Server - Status Endpoints

Health check used by load balancers and container probes.
"""

from datetime import datetime, timezone
from fastapi import APIRouter

from config import GetSettings


# Create router instance
router = APIRouter()


@router.get("/health", tags=["Status"])
async def health_check():
    """
    Health check endpoint to verify server is running

    Returns:
        dict: Server status information
    """
    settings = GetSettings()
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "environment": settings.ENVIRONMENT.value,
        "timestamp_utc": datetime.now(timezone.utc).isoformat()
    }
