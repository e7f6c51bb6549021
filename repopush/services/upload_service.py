"""Upload orchestrator: archive bytes to repository, one file at a time.

Pipeline for one job:
  1. pending -> processing, extract the archive (corrupt archive fails the job)
  2. record the file count
  3. pre-flight repository access (any failure fails the job, nothing written)
  4. write each file sequentially; a failing file is logged and skipped
  5. processing -> completed

Errors from the run never propagate to the caller. They end up in the job
record: terminal ``error`` plus an error log entry.
"""

import logging
from typing import Callable, Optional

from ..exceptions import CorruptArchiveError, InvalidJobTransitionError, RepoPushException, UploadError
from ..models.job import Job, JobStatus, LogEntry, LogLevel
from ..repositories.job_registry import JobRegistry
from .access_validator import validate_access
from .archive_reader import destination_path, encode_content, read_archive
from .github_client import GitHubClient
from .remote_writer import RemoteWriter

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GitHubClient]


def default_commit_message(entry_path: str) -> str:
    return f"Upload {entry_path}"


def progress_percent(started: int, total: int) -> int:
    """Integer share of entries started so far. Stays below 100 until completion."""
    if total <= 0:
        return 0
    return min(99, started * 100 // total)


class UploadService:
    """
    Drives one upload job through its lifecycle.

    The service owns no state of its own: everything observers see lives in
    the registry, updated after each step.

    Args:
        registry: Job store shared with the read path.
        client_factory: Builds a GitHub client for a job's token.
    """

    def __init__(self, registry: JobRegistry, client_factory: Optional[ClientFactory] = None):
        self.registry = registry
        self.client_factory: ClientFactory = client_factory or GitHubClient

    def run(self, job_id: str, archive: bytes) -> None:
        """Execute the pipeline for *job_id*. Never raises."""
        job = self.registry.get(job_id)
        if job is None:
            logger.error(f"Upload run requested for unknown job {job_id}")
            return

        try:
            self._run(job, archive)
        except Exception as e:
            logger.exception(f"Job {job_id} failed unexpectedly", extra={"job_id": job_id})
            self._fail(job_id, str(e) or type(e).__name__)

    def _run(self, job: Job, archive: bytes) -> None:
        job_id = job.id
        self.registry.update(
            job_id,
            status=JobStatus.PROCESSING,
            append_logs=[LogEntry(LogLevel.INFO, "Extracting archive")],
        )

        try:
            entries = read_archive(archive)
        except CorruptArchiveError as e:
            logger.warning(f"Job {job_id}: {e.message}", extra={"job_id": job_id})
            self._fail(job_id, e.message)
            return

        total = len(entries)
        self.registry.update(
            job_id,
            total_files=total,
            append_logs=[LogEntry(LogLevel.INFO, f"{total} files found in archive")],
        )

        client = self.client_factory(job.github_token)
        try:
            try:
                ref = validate_access(client, job.repository_url)
            except RepoPushException as e:
                logger.warning(f"Job {job_id}: pre-flight failed: {e.message}", extra={"job_id": job_id})
                self._fail(job_id, e.message)
                return

            self.registry.append_log(
                job_id, LogLevel.INFO, f"Access to {ref.full_name} verified, uploading to {job.target_branch}",
            )

            writer = RemoteWriter(client)
            template = (job.commit_message or "").strip()
            failures = 0

            for index, entry in enumerate(entries):
                self.registry.update(
                    job_id,
                    current_file=entry.path,
                    files_processed=index,
                    progress=progress_percent(index, total),
                )

                path = destination_path(entry.path, job.preserve_structure)
                try:
                    writer.write_file(
                        ref,
                        path,
                        encode_content(entry.content),
                        message=template or default_commit_message(entry.path),
                        branch=job.target_branch,
                        overwrite=job.overwrite_files,
                    )
                except UploadError as e:
                    failures += 1
                    logger.warning(f"Job {job_id}: {e.message}", extra={"job_id": job_id, "path": path})
                    self.registry.append_log(
                        job_id, LogLevel.ERROR, f"Error for {entry.path}: {e.remote_message}",
                    )
                    continue

                self.registry.append_log(job_id, LogLevel.INFO, f"File uploaded: {entry.path}")
        finally:
            client.close()

        summary = "Upload finished"
        if failures:
            summary = f"Upload finished with {failures} failed file(s) out of {total}"
        self.registry.update(
            job_id,
            status=JobStatus.COMPLETED,
            progress=100,
            files_processed=total,
            current_file=None,
            append_logs=[LogEntry(LogLevel.INFO, summary)],
        )
        logger.info(
            f"Job {job_id} completed",
            extra={"job_id": job_id, "total_files": total, "failed_files": failures},
        )

    def _fail(self, job_id: str, message: str) -> None:
        try:
            self.registry.update(
                job_id,
                status=JobStatus.FAILED,
                error=message,
                current_file=None,
                append_logs=[LogEntry(LogLevel.ERROR, f"Fatal error: {message}")],
            )
        except InvalidJobTransitionError as e:
            # Job already reached a terminal state; keep that outcome.
            logger.error(f"Could not mark job {job_id} failed: {e.message}")
