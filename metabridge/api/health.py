from typing import Any, Dict

from fastapi import APIRouter

from .. import __version__
from ..config import settings

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Liveness probe; does not call the bridge API."""
    return {
        "status": "healthy",
        "version": __version__,
        "bridge_api": settings.bridge_api_url,
    }
