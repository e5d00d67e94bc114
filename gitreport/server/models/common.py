"""Common Pydantic models for API responses."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    kind: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check payload."""
    status: str
    uptime_seconds: int
    version: str
