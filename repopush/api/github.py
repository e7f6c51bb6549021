"""GitHub pre-flight and sample archive endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..dependencies import get_client_factory
from ..schemas.upload import GitHubValidationRequest, GitHubValidationResponse, RepositoryInfo
from ..services.access_validator import validate_access
from ..services.archive_reader import build_sample_archive
from ..services.upload_service import ClientFactory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["github"])


@router.post("/github/validate", response_model=GitHubValidationResponse)
def validate_github_access(
    request: GitHubValidationRequest,
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Check that a token can reach a repository without starting an upload.

    Failures are returned by the exception handler with their own error code
    (INVALID_REFERENCE, INVALID_CREDENTIAL, NOT_FOUND_OR_NO_ACCESS, REMOTE_ERROR).
    """
    client = client_factory(request.token)
    try:
        ref = validate_access(client, request.repository_url)
    finally:
        client.close()

    logger.info(f"GitHub access validated for {ref.full_name}")
    return GitHubValidationResponse(
        success=True,
        message="GitHub connection validated",
        repository=RepositoryInfo(owner=ref.owner, repo=ref.repo),
    )


@router.post("/sample-archive")
def download_sample_archive():
    """Small ZIP with nested folders for trying an upload end to end."""
    return Response(
        content=build_sample_archive(),
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="sample-project.zip"'},
    )
