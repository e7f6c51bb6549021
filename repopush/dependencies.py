"""FastAPI dependencies for process-wide collaborators.

The job registry and the submission limiter are created by the app lifespan
and stored on ``app.state``; routes reach them only through dependencies so tests can override them.
"""

from fastapi import Request

from .repositories.job_registry import JobRegistry
from .services.github_client import GitHubClient
from .services.submission_limiter import SubmissionLimiter
from .services.upload_service import ClientFactory


def get_registry(request: Request) -> JobRegistry:
    """Registry owned by the running application."""
    return request.app.state.registry


def get_client_factory() -> ClientFactory:
    """Factory building a GitHub client for a token."""
    return GitHubClient


def get_submission_limiter(request: Request) -> SubmissionLimiter:
    """Per-token upload limiter owned by the running application."""
    return request.app.state.submission_limiter
