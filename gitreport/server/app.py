"""
FastAPI application factory for the gitreport service.

Creates the app with report routes, error mapping and CORS.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gitreport import __version__
from gitreport.config.loader import load_config
from gitreport.errors import InvalidInput, ReportError
from gitreport.report.service import ReportService

logger = logging.getLogger("gitreport.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure config and service exist before serving requests."""
    if not hasattr(app.state, "config"):
        app.state.config = load_config()
    if not hasattr(app.state, "service"):
        app.state.service = ReportService(app.state.config)
    logger.info("gitreport service ready (timezone %s)", app.state.config.get("timezone"))
    yield


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return "Invalid JSON format"

    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "Invalid request: " + "; ".join(parts)


def create_app(config: dict = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="gitreport API",
        description="Daily and weekly activity reports from git history",
        version=__version__,
        lifespan=lifespan,
    )

    if config:
        app.state.config = config
        app.state.service = ReportService(config)

    origins = ((config or {}).get("server") or {}).get("cors_origins") or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReportError)
    async def report_error_handler(request: Request, exc: ReportError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "kind": exc.kind},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=InvalidInput.status_code,
            content={"error": _validation_message(exc), "kind": InvalidInput.kind},
        )

    # Global exception handler; internals stay in the log
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    from gitreport.server.routes.health import router as health_router
    from gitreport.server.routes.reports import router as reports_router

    app.include_router(health_router)
    app.include_router(reports_router)

    return app
