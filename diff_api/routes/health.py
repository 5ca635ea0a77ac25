"""
Health check endpoint. Minimal, stable, no comparison logic.
"""
from fastapi import APIRouter
from datetime import datetime, timezone
from diff_api.schemas import HealthResponse
from diff_api.settings import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> HealthResponse:
    """Service status, version, commit. Just a heartbeat."""
    return HealthResponse(
        status="ok",
        service="structdiff-api",
        version=settings.api_version,
        commit=settings.build_commit,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
