"""
Report service: orchestrates reader, window selector, aggregator and renderer.

Each request runs as one synchronous job with its own reader. A job moves
through received -> validating -> reading -> filtering -> aggregating ->
rendering -> completed, or ends in failed. Callers get a whole document
or a single error, never a partial report.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from gitreport.config.loader import DEFAULT_CONFIG, get_git_timeout, get_timezone
from gitreport.errors import ErrorDescriptor, InternalRenderError, InvalidInput, ReportError
from gitreport.git.reader import RepositoryReader
from gitreport.models.entities import ReportDocument, ReportRequest
from gitreport.report.aggregator import aggregate
from gitreport.report.renderer import render
from gitreport.report.templating import render_template
from gitreport.report.window import compute_window, filter_commits

logger = logging.getLogger(__name__)

RECEIVED = "received"
VALIDATING = "validating"
READING = "reading"
FILTERING = "filtering"
AGGREGATING = "aggregating"
RENDERING = "rendering"
COMPLETED = "completed"
FAILED = "failed"

TERMINAL_STATES = (COMPLETED, FAILED)

# Allowed transitions; any non-terminal state may also go to FAILED
_NEXT_STATE = {
    RECEIVED: VALIDATING,
    VALIDATING: READING,
    READING: FILTERING,
    FILTERING: AGGREGATING,
    AGGREGATING: RENDERING,
    RENDERING: COMPLETED,
}

ReaderFactory = Callable[..., RepositoryReader]


@dataclass
class ReportJob:
    """Lifecycle of a single report request."""
    request: ReportRequest
    state: str = RECEIVED
    history: List[str] = field(default_factory=lambda: [RECEIVED])

    def advance(self, state: str) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"job already {self.state}")
        if state != FAILED and _NEXT_STATE.get(self.state) != state:
            raise RuntimeError(f"illegal transition {self.state} -> {state}")
        logger.debug("report job %s -> %s (%s)", self.state, state, self.request.repo_path)
        self.state = state
        self.history.append(state)


@dataclass
class ReportOutcome:
    """Result of handle(): exactly one of document or error is set."""
    job: ReportJob
    document: Optional[ReportDocument] = None
    error: Optional[ErrorDescriptor] = None

    @property
    def ok(self) -> bool:
        return self.document is not None


class ReportService:
    """Generates report documents from repository history."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        reader_factory: Optional[ReaderFactory] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.reader_factory = reader_factory or RepositoryReader

    def validate(self, request: ReportRequest) -> None:
        """
        Check request fields before the repository is touched.

        Raises:
            InvalidInput: empty path, unsupported type, malformed date,
                unknown timezone or missing template file
        """
        if not request.repo_path or not str(request.repo_path).strip():
            raise InvalidInput("Repository path is required", field="repoPath")
        # compute_window validates type, date and timezone
        compute_window(request.report_type, request.date, get_timezone(self.config))
        template = self._template(request)
        if template and not Path(template).expanduser().is_file():
            raise InvalidInput(f"Template file not found: {template}", field="template")

    def _template(self, request: ReportRequest) -> Optional[str]:
        return request.template or self.config.get("template") or None

    def _make_reader(self, request: ReportRequest) -> RepositoryReader:
        return self.reader_factory(
            request.repo_path.strip(),
            git_binary=self.config.get("git_binary", "git"),
            timeout=get_git_timeout(self.config),
            author=request.author or None,
        )

    def generate(self, request: ReportRequest, job: Optional[ReportJob] = None) -> ReportDocument:
        """
        Run the whole pipeline for one request.

        Raises:
            ReportError: any failure, already mapped to the error taxonomy
        """
        job = job or ReportJob(request)
        try:
            job.advance(VALIDATING)
            self.validate(request)
            window = compute_window(request.report_type, request.date, get_timezone(self.config))

            job.advance(READING)
            reader = self._make_reader(request)
            commits = reader.read()
            repo_info = reader.repo_info()

            job.advance(FILTERING)
            windowed = filter_commits(commits, window)

            job.advance(AGGREGATING)
            try:
                summaries = aggregate(windowed, window)
            except ReportError:
                raise
            except Exception:
                logger.exception("Aggregation failed for %s", request.repo_path)
                raise InternalRenderError("Failed to generate report")
            finally:
                # Stops the git process if aggregation ended early
                windowed.close()

            job.advance(RENDERING)
            template = self._template(request)
            try:
                if template:
                    content = render_template(
                        template,
                        summaries,
                        window,
                        request.report_type,
                        repo_info=repo_info,
                        top_files=self.config.get("top_files", 5),
                    )
                else:
                    content = render(
                        summaries,
                        window,
                        request.report_type,
                        repo_info=repo_info,
                        max_files_per_author=self.config.get("max_files_per_author", 50),
                        top_files=self.config.get("top_files", 5),
                    )
            except ReportError:
                raise
            except Exception:
                logger.exception("Rendering failed for %s", request.repo_path)
                raise InternalRenderError("Failed to render report")

        except ReportError as exc:
            job.advance(FAILED)
            logger.info("Report for %s failed: %s", request.repo_path, exc.message)
            raise
        except Exception:
            job.advance(FAILED)
            raise

        job.advance(COMPLETED)
        return ReportDocument(
            report_type=request.report_type,
            date=window.date.isoformat(),
            content=content,
        )

    def handle(self, request: ReportRequest) -> ReportOutcome:
        """Run a request and return the document or a single error descriptor."""
        job = ReportJob(request)
        try:
            document = self.generate(request, job)
        except ReportError as exc:
            return ReportOutcome(job=job, error=exc.to_descriptor())
        return ReportOutcome(job=job, document=document)
