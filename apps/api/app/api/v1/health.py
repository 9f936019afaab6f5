"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter

from app.core.deps import SettingsDep
from app.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Liveness probe.

    Reports whether emails are actually being sent or only logged.
    """
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(UTC),
        is_dry_run=settings.is_dry_run,
    )
