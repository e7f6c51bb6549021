"""Business logic services."""

from .upload_service import UploadService
from .remote_writer import RemoteWriter
from .github_client import GitHubClient, GitHubAPIError
from .submission_limiter import SubmissionLimiter

__all__ = ["UploadService", "RemoteWriter", "GitHubClient", "GitHubAPIError", "SubmissionLimiter"]
