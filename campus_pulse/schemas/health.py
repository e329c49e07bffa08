"""Health check response body."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Process liveness plus a live database round trip."""

    status: Literal["ok"] = "ok"
    environment: str = Field(description="APP_ENV of the running process")
    database: Literal["connected", "disconnected"]
