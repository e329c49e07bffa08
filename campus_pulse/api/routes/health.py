"""Root banner and health check with database connectivity."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_pulse.api.deps import get_app_settings
from campus_pulse.core.config import Settings
from campus_pulse.core.database import check_db_connected, get_db
from campus_pulse.schemas.health import HealthResponse
from campus_pulse.schemas.messages import MessageResponse

router = APIRouter()


@router.get("/", response_model=MessageResponse)
def root() -> MessageResponse:
    """Liveness banner for platform probes."""
    return MessageResponse(message="Campus Pulse API is running!")


@router.get("/health", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
    )
