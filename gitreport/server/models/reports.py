"""Pydantic models for report generation API."""

from typing import Optional

from pydantic import BaseModel, Field

from gitreport.models.entities import ReportRequest


class GenerateReportRequest(BaseModel):
    """Body of POST /api/generate-report.

    Fields are plain strings so the report service, not the schema layer,
    decides what is valid and words the error.
    """
    repo_path: str = Field("", alias="repoPath")
    type: str = ""
    date: str = ""
    author: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_request(self) -> ReportRequest:
        return ReportRequest(
            repo_path=self.repo_path,
            report_type=self.type,
            date=self.date,
            author=self.author,
        )


class GenerateReportResponse(BaseModel):
    """Successful report generation."""
    content: str
    type: str
    date: str


class OptimizeReportRequest(BaseModel):
    """Body of POST /api/optimize-report."""
    content: str = ""


class OptimizeReportResponse(BaseModel):
    """Polished report text."""
    optimized_content: str = Field(..., alias="optimizedContent")

    model_config = {"populate_by_name": True}
