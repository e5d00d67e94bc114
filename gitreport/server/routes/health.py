"""Health check endpoint."""

import time

from fastapi import APIRouter

from gitreport import __version__
from gitreport.server.models.common import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check: returns status, uptime and version."""
    return HealthResponse(
        status="ok",
        uptime_seconds=int(time.time() - _start_time),
        version=__version__,
    )
