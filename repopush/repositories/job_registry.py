"""In-memory job registry.

Single owner of job state for one server process. Created by the app
lifespan and handed to whoever needs it; there is no module-level instance.

Thread-safe: one lock serializes every mutation, and stored values are
immutable ``Job`` snapshots swapped in atomically, so readers always get a
consistent record without holding the lock while they use it.
"""

import dataclasses
import logging
import threading
import uuid
from typing import Dict, Iterable, List, Optional

from ..exceptions import InvalidJobTransitionError
from ..models.job import Job, JobStatus, LogEntry, LogLevel, utcnow

logger = logging.getLogger(__name__)

# Fields callers may pass to create(). Everything else is owned by the registry.
_CREATE_FIELDS = frozenset({
    "github_token",
    "repository_url",
    "target_branch",
    "commit_message",
    "preserve_structure",
    "overwrite_files",
})

# Fields callers may merge through update(). Logs go through append_logs only.
_MUTABLE_FIELDS = frozenset({
    "status",
    "progress",
    "current_file",
    "files_processed",
    "total_files",
    "error",
})

INITIAL_LOG_MESSAGE = "Job created"


class JobRegistry:
    """Concurrency-safe store of upload jobs keyed by id."""

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, **fields) -> Job:
        """Register a new pending job and return its first snapshot.

        Args:
            **fields: Submission fields (token, repository URL, branch,
                commit message template, policy flags).

        Raises:
            ValueError: If a field is not a submission field.
        """
        unknown = set(fields) - _CREATE_FIELDS
        if unknown:
            raise ValueError(f"Cannot set {sorted(unknown)} when creating a job")

        now = utcnow()
        job = Job(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            logs=(LogEntry(LogLevel.INFO, INITIAL_LOG_MESSAGE, timestamp=now),),
            **fields,
        )
        with self._lock:
            self._jobs[job.id] = job

        logger.info(f"Created job {job.id}", extra={"job_id": job.id})
        return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def update(
        self,
        job_id: str,
        append_logs: Iterable[LogEntry] = (),
        **fields,
    ) -> Optional[Job]:
        """
        Merge *fields* into a job and append *append_logs* to its log.

        The log is only ever extended; there is no way to replace it.

        Returns:
            The new snapshot, or None if the job id is unknown.

        Raises:
            ValueError: If a field is not mutable through this method.
            InvalidJobTransitionError: If ``status`` would move backwards
                or leave a terminal state.
        """
        illegal = set(fields) - _MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Cannot update {sorted(illegal)} on a job")
        new_logs = tuple(append_logs)

        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None

            status = fields.get("status")
            if status is not None:
                status = JobStatus(status)
                if not current.status.can_transition_to(status):
                    raise InvalidJobTransitionError(job_id, current.status.value, status.value)
                fields["status"] = status

            updated = dataclasses.replace(
                current,
                logs=current.logs + new_logs,
                updated_at=utcnow(),
                **fields,
            )
            self._jobs[job_id] = updated
            return updated

    def append_log(self, job_id: str, level: LogLevel, message: str) -> Optional[Job]:
        """Append a single log entry. Returns None if the job id is unknown."""
        return self.update(job_id, append_logs=[LogEntry(level, message)])

    def list_all(self) -> List[Job]:
        """All jobs, oldest first."""
        with self._lock:
            jobs = list(self._jobs.values())
        return sorted(jobs, key=lambda j: j.created_at)

    def clear(self) -> None:
        """Drop every job. Called on shutdown."""
        with self._lock:
            count = len(self._jobs)
            self._jobs.clear()
        if count:
            logger.info(f"Discarded {count} in-memory job(s)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
