"""Upload job and repository validation schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional

from ..core.config import settings
from ..models.job import JobStatus, LogLevel


def _check_repository_url(v: str) -> str:
    v = v.strip()
    if not v.startswith(("https://", "http://", "git@")):
        raise ValueError("repository_url must be an http(s) or git@ URL")
    return v


class UploadJobCreate(BaseModel):
    """Submission parameters, sent as the ``job_data`` JSON form field."""
    github_token: str = Field(..., min_length=1)
    repository_url: str = Field(..., min_length=1)
    target_branch: str = Field(default_factory=lambda: settings.default_branch, min_length=1)
    commit_message: Optional[str] = None
    preserve_structure: bool = True
    overwrite_files: bool = False

    @field_validator("repository_url")
    @classmethod
    def validate_repository_url(cls, v: str) -> str:
        return _check_repository_url(v)


class LogEntryResponse(BaseModel):
    """One job log line."""
    timestamp: datetime
    level: LogLevel
    message: str

    class Config:
        from_attributes = True


class UploadJobResponse(BaseModel):
    """Schema for upload job status. Credentials are never included."""
    id: str
    target_branch: str
    commit_message: Optional[str] = None
    preserve_structure: bool
    overwrite_files: bool
    status: JobStatus
    progress: int
    current_file: Optional[str] = None
    files_processed: int
    total_files: int
    logs: List[LogEntryResponse]
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UploadAcceptedResponse(BaseModel):
    """Response after an upload has been queued."""
    job_id: str
    status: str
    message: str


class GitHubValidationRequest(BaseModel):
    """Pre-flight check of a token against a repository."""
    token: str = Field(..., min_length=1)
    repository_url: str = Field(..., min_length=1)

    @field_validator("repository_url")
    @classmethod
    def validate_repository_url(cls, v: str) -> str:
        return _check_repository_url(v)


class RepositoryInfo(BaseModel):
    owner: str
    repo: str


class GitHubValidationResponse(BaseModel):
    success: bool
    message: str
    repository: RepositoryInfo
