"""
Firenotes — Shared Response Schemas
====================================

What:  Error and health bodies used across every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error body for all API errors."""

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str
    store_backend: str
    document_store: str = Field(description="connected, disconnected")
    identity_provider: str = Field(description="available, unavailable")
    active_clients: int
    uptime_seconds: float
