"""Pydantic schemas for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus database reachability, for load balancers and monitoring."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    servicio: str = Field(default="clima-api", description="Service name")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether a trivial query against the database succeeded",
    )
