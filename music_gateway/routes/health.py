# ABOUTME: Health and debug API routes
# ABOUTME: Implements / liveness and /_debug credential and Vertex configuration report
from fastapi import APIRouter

from music_gateway.config import get_settings
from music_gateway.models.responses import HealthStatus, DebugStatus

router = APIRouter()

@router.get("/", response_model=HealthStatus)
async def health_check():
    """
    Basic health check - service is running
    """
    return HealthStatus(status="ok", message="Lyria music server is running")

@router.get("/_debug", response_model=DebugStatus)
async def debug_status():
    """
    Report Vertex configuration and whether the credentials file exists.

    The credentials file is not opened or validated.
    """
    settings = get_settings()

    return DebugStatus(
        status="ok",
        project=settings.project,
        location=settings.location,
        GOOGLE_APPLICATION_CREDENTIALS=settings.credentials_path,
        credentialsFileExists=settings.credentials_file_exists,
    )
