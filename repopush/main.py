"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import uploads_router, github_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .exceptions import RepoPushException
from .middleware.exception_handler import repopush_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .models.job import JobStatus
from .repositories.job_registry import JobRegistry
from .services.submission_limiter import SubmissionLimiter

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle: owns the job registry and the submission limiter."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        origins = settings.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            logger.warning(
                "CORS allows localhost origins: %s. Remove these for production.",
                localhost_origins,
            )

    app.state.registry = JobRegistry()
    app.state.submission_limiter = SubmissionLimiter(
        settings.max_submissions_per_token,
        settings.submission_window_seconds,
    )
    logger.info(
        "RepoPush API started | env=%s | github=%s | max_archive=%dMiB | retries=%d | uploads_per_token=%d",
        settings.environment.value,
        settings.github_api_url,
        settings.max_archive_bytes // (1024 * 1024),
        settings.github_max_retries,
        settings.max_submissions_per_token,
    )

    yield  # App runs here

    # Job state is ephemeral; anything still processing is lost.
    registry: JobRegistry = app.state.registry
    in_flight = [j.id for j in registry.list_all() if not j.status.is_terminal]
    if in_flight:
        logger.warning(f"Shutting down with {len(in_flight)} unfinished job(s)", extra={"job_ids": in_flight})
    registry.clear()


# Create FastAPI app
app = FastAPI(
    title="RepoPush API",
    description=(
        "Upload a ZIP archive and commit its files, one by one, into a GitHub repository. "
        "Submissions return a job id immediately; poll `GET /api/upload/{job_id}` for "
        "progress and the job log.\n\n"
        "GitHub tokens are accepted on submission and never returned."
    ),
    version=__version__,
    license_info={"name": "MIT", "url": "https://opensource.org/licenses/MIT"},
    lifespan=lifespan,
)

# Middleware stack (outermost first, CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(RepoPushException, repopush_exception_handler)

# Include routers
app.include_router(uploads_router)
app.include_router(github_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "RepoPush API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(request: Request):
    """Liveness probe with job counts per status."""
    registry: JobRegistry = request.app.state.registry
    counts = {status.value: 0 for status in JobStatus}
    for job in registry.list_all():
        counts[job.status.value] += 1

    return {
        "status": "healthy",
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "jobs": counts,
    }
