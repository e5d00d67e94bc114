"""FastAPI dependency injection for config and the report service."""

from fastapi import Request

from gitreport.report.service import ReportService


def get_service(request: Request) -> ReportService:
    """Get the shared report service from app state."""
    return request.app.state.service


def get_config(request: Request) -> dict:
    """Get the loaded config from app state."""
    return request.app.state.config
