"""Pydantic schemas for API validation."""

from .upload import (
    UploadJobCreate,
    UploadJobResponse,
    UploadAcceptedResponse,
    LogEntryResponse,
    GitHubValidationRequest,
    GitHubValidationResponse,
    RepositoryInfo,
)

__all__ = [
    "UploadJobCreate",
    "UploadJobResponse",
    "UploadAcceptedResponse",
    "LogEntryResponse",
    "GitHubValidationRequest",
    "GitHubValidationResponse",
    "RepositoryInfo",
]
