"""Custom exception hierarchy for RepoPush."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Submission errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ARCHIVE_TOO_LARGE = "ARCHIVE_TOO_LARGE"
    UNSUPPORTED_ARCHIVE_TYPE = "UNSUPPORTED_ARCHIVE_TYPE"

    # Job errors
    JOB_NOT_FOUND = "JOB_NOT_FOUND"
    INVALID_JOB_TRANSITION = "INVALID_JOB_TRANSITION"

    # Repository access errors
    INVALID_REFERENCE = "INVALID_REFERENCE"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    NOT_FOUND_OR_NO_ACCESS = "NOT_FOUND_OR_NO_ACCESS"
    REMOTE_ERROR = "REMOTE_ERROR"

    # Archive errors
    CORRUPT_ARCHIVE = "CORRUPT_ARCHIVE"

    # Per-file upload errors
    UPLOAD_ERROR = "UPLOAD_ERROR"

    # Rate limiting
    RATE_LIMITED = "RATE_LIMITED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RepoPushException(Exception):
    """
    Base exception for all RepoPush errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(RepoPushException):
    """Validation failed for a submission."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class ArchiveTooLargeError(RepoPushException):
    """Uploaded archive exceeds the configured size bound."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Archive is {size} bytes, the limit is {limit} bytes",
            ErrorCode.ARCHIVE_TOO_LARGE,
            status_code=413,
            details={"size": size, "limit": limit}
        )


class UnsupportedArchiveTypeError(RepoPushException):
    """Uploaded file is not a ZIP archive."""

    def __init__(self, filename: Optional[str], content_type: Optional[str]):
        super().__init__(
            "Only ZIP archives are accepted",
            ErrorCode.UNSUPPORTED_ARCHIVE_TYPE,
            status_code=415,
            details={"filename": filename, "content_type": content_type}
        )


class JobNotFoundError(RepoPushException):
    """Upload job not found in the registry."""

    def __init__(self, job_id: str):
        super().__init__(
            f"Job not found: {job_id}",
            ErrorCode.JOB_NOT_FOUND,
            status_code=404,
            details={"job_id": job_id}
        )


class InvalidJobTransitionError(RepoPushException):
    """Requested status change would move a job backwards or out of a terminal state."""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(
            f"Job {job_id} cannot move from {current} to {requested}",
            ErrorCode.INVALID_JOB_TRANSITION,
            status_code=409,
            details={"job_id": job_id, "current": current, "requested": requested}
        )


class InvalidReferenceError(RepoPushException):
    """Repository URL does not have the expected owner/repo shape."""

    def __init__(self, repository_url: str):
        super().__init__(
            "Invalid GitHub repository URL",
            ErrorCode.INVALID_REFERENCE,
            status_code=400,
            details={"repository_url": repository_url}
        )


class InvalidCredentialError(RepoPushException):
    """GitHub rejected the token."""

    def __init__(self, message: str = "GitHub token is invalid or expired"):
        super().__init__(
            message,
            ErrorCode.INVALID_CREDENTIAL,
            status_code=401,
        )


class NotFoundOrNoAccessError(RepoPushException):
    """Repository does not exist or the token cannot see it."""

    def __init__(self, owner: str, repo: str):
        super().__init__(
            "Repository not found or not accessible",
            ErrorCode.NOT_FOUND_OR_NO_ACCESS,
            status_code=404,
            details={"owner": owner, "repo": repo}
        )


class RemoteError(RepoPushException):
    """Any other GitHub failure during pre-flight."""

    def __init__(self, remote_message: str, remote_status: Optional[int] = None):
        details: Dict[str, Any] = {}
        if remote_status:
            details["remote_status"] = remote_status
        super().__init__(
            f"GitHub error: {remote_message}",
            ErrorCode.REMOTE_ERROR,
            status_code=502,
            details=details
        )


class CorruptArchiveError(RepoPushException):
    """Archive bytes could not be decoded."""

    def __init__(self, reason: str):
        super().__init__(
            f"Corrupt archive: {reason}",
            ErrorCode.CORRUPT_ARCHIVE,
            status_code=422,
        )


class UploadError(RepoPushException):
    """Writing a single file to the repository failed."""

    def __init__(self, path: str, remote_message: str):
        super().__init__(
            f"Upload failed for {path}: {remote_message}",
            ErrorCode.UPLOAD_ERROR,
            status_code=502,
            details={"path": path}
        )
        self.path = path
        self.remote_message = remote_message


class SubmissionRateLimitedError(RepoPushException):
    """Token has used its upload allowance for the current window."""

    def __init__(self, retry_after: float, limit: int, window_seconds: float):
        super().__init__(
            f"Upload limit of {limit} per {int(window_seconds)}s reached for this token",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"retry_after": round(max(retry_after, 0.0), 1), "limit": limit}
        )
        self.retry_after = max(retry_after, 0.0)
