from fastapi import APIRouter

from apps.api.config import settings

router = APIRouter()

@router.get("/health")
async def health_check():
    """ Liveness of the diagnostics API itself

    Returns service status, name and version. Says nothing about the
    health of the system being diagnosed; use POST /diagnostics/run for that.
    """
    return {
        "status": "ok",
        "name": settings.app_name,
        "version": settings.app_version,
    }
