"""
Health and version endpoints
"""
from fastapi import APIRouter

from leaveflow.core.config import settings

router = APIRouter()

SERVICE_NAME = "leaveflow"


@router.get("/health")
async def health_check():
    """Liveness check"""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/version")
async def get_version():
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
    }
