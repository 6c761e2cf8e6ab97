"""
Common response models.

Dependencies: pydantic
System role: Common API response structures
"""

from typing import Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str = Field(description="Error message")
    details: dict | None = Field(default=None, description="Additional error context")


class MaintenanceResult(BaseModel):
    """Rows affected by a retention sweep."""

    affected: int


class ServiceStates(BaseModel):
    """Per-component status."""

    session: Literal["active", "degraded"] = "active"
    analytics: Literal["active", "degraded"] = "active"
    monitoring: Literal["active", "degraded"]


class HealthStatus(BaseModel):
    """Health of the database, the trace sink and the services built on them."""

    database: Literal["connected", "disconnected"]
    trace: Literal["connected", "disconnected"]
    services: ServiceStates
