"""Upload job model.

Jobs are immutable snapshots: every mutation produces a new ``Job`` via
``dataclasses.replace`` inside the registry, so a reader holding a snapshot
never sees fields from two different revisions.

Status transitions: pending -> processing -> completed | failed.
A pending job may also fail directly.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    def can_transition_to(self, target: "JobStatus") -> bool:
        """Whether moving from this status to *target* goes forward."""
        if self == target:
            return not self.is_terminal
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogEntry:
    """One line of a job's diagnostic trail."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=utcnow)

    def format_line(self) -> str:
        """Render as ``[timestamp] [LEVEL] message`` for plain-text export."""
        return f"[{self.timestamp.isoformat()}] [{self.level.value.upper()}] {self.message}"


@dataclass(frozen=True)
class Job:
    """
    One archive-to-repository synchronization run.

    ``github_token`` and ``repository_url`` are write-only: they are kept out
    of ``repr`` and never serialized into API responses.
    """

    id: str
    github_token: str = field(repr=False)
    repository_url: str = field(repr=False)
    created_at: datetime
    updated_at: datetime
    target_branch: str = "main"
    commit_message: Optional[str] = None
    preserve_structure: bool = True
    overwrite_files: bool = False

    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    current_file: Optional[str] = None
    files_processed: int = 0
    total_files: int = 0
    logs: Tuple[LogEntry, ...] = ()
    error: Optional[str] = None
