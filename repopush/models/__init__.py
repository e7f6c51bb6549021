"""Job state types."""

from .job import Job, JobStatus, LogEntry, LogLevel

__all__ = ["Job", "JobStatus", "LogEntry", "LogLevel"]
