"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for GET /health/."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    service: str = Field(default="lumasms-accounts", description="Service name")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether the accounts database answered a trivial query",
    )
