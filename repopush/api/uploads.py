"""Upload job endpoints.

Endpoints are thin: submission validates and creates the job, then hands the
run to UploadService as a background task and returns immediately.
"""

import logging
from typing import List

import pydantic
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from fastapi.responses import PlainTextResponse

from ..core.config import settings
from ..dependencies import get_client_factory, get_registry, get_submission_limiter
from ..exceptions import (
    ArchiveTooLargeError,
    JobNotFoundError,
    UnsupportedArchiveTypeError,
    ValidationError,
)
from ..repositories.job_registry import JobRegistry
from ..schemas.upload import UploadAcceptedResponse, UploadJobCreate, UploadJobResponse
from ..services.submission_limiter import SubmissionLimiter
from ..services.upload_service import ClientFactory, UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["uploads"])

ZIP_CONTENT_TYPES = frozenset({
    "application/zip",
    "application/x-zip-compressed",
    "application/x-zip",
})


def _is_zip(upload: UploadFile) -> bool:
    if upload.content_type in ZIP_CONTENT_TYPES:
        return True
    return (upload.filename or "").lower().endswith(".zip")


def _parse_job_data(job_data: str) -> UploadJobCreate:
    """Validate the ``job_data`` JSON form field."""
    try:
        return UploadJobCreate.model_validate_json(job_data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(f"Invalid job data: {first.get('msg', 'invalid value')}", field=field) from e


@router.post("", response_model=UploadAcceptedResponse, status_code=202)
async def submit_upload(
    background_tasks: BackgroundTasks,
    archive: UploadFile = File(...),
    job_data: str = Form(...),
    registry: JobRegistry = Depends(get_registry),
    client_factory: ClientFactory = Depends(get_client_factory),
    limiter: SubmissionLimiter = Depends(get_submission_limiter),
):
    """Queue an archive for upload to a GitHub repository.

    Rejections (bad parameters, wrong file type, oversized or empty archive,
    per-token submission limit) happen before any job is created. Once
    accepted, progress is read from ``GET /api/upload/{job_id}``.
    """
    params = _parse_job_data(job_data)

    if not _is_zip(archive):
        raise UnsupportedArchiveTypeError(archive.filename, archive.content_type)

    limit = settings.max_archive_bytes
    data = await archive.read(limit + 1)
    if len(data) > limit:
        raise ArchiveTooLargeError(len(data), limit)
    if not data:
        raise ValidationError("Archive is empty", field="archive")

    limiter.acquire(params.github_token)
    job = registry.create(**params.model_dump())
    service = UploadService(registry, client_factory)
    background_tasks.add_task(service.run, job.id, data)

    logger.info(
        f"Upload queued: job {job.id}",
        extra={"job_id": job.id, "archive_bytes": len(data), "archive_name": archive.filename},
    )
    return UploadAcceptedResponse(job_id=job.id, status=job.status.value, message="Upload started")


@router.get("", response_model=List[UploadJobResponse])
def list_uploads(registry: JobRegistry = Depends(get_registry)):
    """List every job known to this process, newest first."""
    return list(reversed(registry.list_all()))


@router.get("/{job_id}", response_model=UploadJobResponse)
def get_upload(job_id: str, registry: JobRegistry = Depends(get_registry)):
    """Current snapshot of a job."""
    job = registry.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job


@router.get("/{job_id}/logs", response_class=PlainTextResponse)
def export_logs(job_id: str, registry: JobRegistry = Depends(get_registry)):
    """Download a job's log as plain text, one entry per line."""
    job = registry.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)

    body = "\n".join(entry.format_line() for entry in job.logs) + "\n"
    return PlainTextResponse(
        body,
        headers={"Content-Disposition": f'attachment; filename="upload-{job.id}.log"'},
    )
