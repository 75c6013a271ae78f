"""
Simple health check endpoint.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from app.api.dependencies import SettingsDep

router = APIRouter(tags=["health"])


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=Dict[str, Any])
async def health_check(settings: SettingsDep):
    """
    Liveness check.

    Reports whether Ton.Place credentials are configured; never echoes them.
    """
    return {
        "status": "healthy",
        "timestamp": _utc_now_iso(),
        "service": settings.app_name,
        "version": settings.app_version,
        "configured": settings.credentials_configured,
    }
