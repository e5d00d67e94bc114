"""
Error taxonomy for report generation.

Every failure a caller can see is a ReportError subclass. Each carries a
stable ``kind`` and the HTTP status the server answers with.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorDescriptor:
    """Single error returned instead of a report."""
    kind: str
    message: str
    status_code: int


class ReportError(Exception):
    """Base exception for report generation failures."""

    kind = "ReportError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_descriptor(self) -> ErrorDescriptor:
        return ErrorDescriptor(kind=self.kind, message=self.message, status_code=self.status_code)


class InvalidInput(ReportError):
    """Raised when a request is rejected before any repository access."""

    kind = "InvalidInput"
    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class RepositoryNotFound(ReportError):
    """Raised when the path does not exist or is not a git repository."""

    kind = "RepositoryNotFound"
    status_code = 404

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class RepositoryUnreadable(ReportError):
    """Raised when the repository exists but history cannot be read."""

    kind = "RepositoryUnreadable"
    status_code = 500

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class OperationTimedOut(ReportError):
    """Raised when reading history exceeds the configured deadline."""

    kind = "OperationTimedOut"
    status_code = 504


class InternalRenderError(ReportError):
    """Raised when aggregation or rendering fails on valid input."""

    kind = "InternalRenderError"
    status_code = 500


class OptimizerError(ReportError):
    """Raised when the report polishing service cannot be used."""

    kind = "OptimizerError"
    status_code = 502
