"""Report generation API endpoints."""

import asyncio

from fastapi import APIRouter, Depends

from gitreport.optimizer import optimize_report
from gitreport.report.service import ReportService
from gitreport.server.dependencies import get_config, get_service
from gitreport.server.models.common import ErrorResponse
from gitreport.server.models.reports import (
    GenerateReportRequest,
    GenerateReportResponse,
    OptimizeReportRequest,
    OptimizeReportResponse,
)

router = APIRouter(prefix="/api", tags=["reports"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.post("/generate-report", response_model=GenerateReportResponse, responses=_ERROR_RESPONSES)
async def generate_report(
    body: GenerateReportRequest,
    service: ReportService = Depends(get_service),
):
    """Generate a daily or weekly markdown report for a local repository."""
    # Git access blocks; keep it off the event loop
    document = await asyncio.to_thread(service.generate, body.to_request())
    return GenerateReportResponse(
        content=document.content,
        type=document.report_type,
        date=document.date,
    )


@router.post("/optimize-report", response_model=OptimizeReportResponse, responses={502: {"model": ErrorResponse}})
async def optimize(
    body: OptimizeReportRequest,
    config: dict = Depends(get_config),
):
    """Polish a generated report with the configured language model."""
    optimized = await optimize_report(body.content, config)
    return OptimizeReportResponse(optimized_content=optimized)
