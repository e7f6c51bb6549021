"""Commit a single file to the target repository."""

import logging
from typing import Optional

from ..exceptions import UploadError
from .access_validator import RepositoryRef
from .github_client import GitHubAPIError, GitHubClient

logger = logging.getLogger(__name__)


class RemoteWriter:
    """
    Writes one file per call through the GitHub contents API.

    With ``overwrite`` set, the existing file's ``sha`` is looked up first
    and passed along so GitHub treats the write as an update. A missing file
    is not an error. Any failure is scoped to the path being written and
    raised as ``UploadError``.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    def write_file(
        self,
        ref: RepositoryRef,
        path: str,
        content_b64: str,
        message: str,
        branch: str,
        overwrite: bool = False,
    ) -> None:
        try:
            sha = self._existing_sha(ref, path, branch) if overwrite else None
            self.client.put_contents(
                ref.owner,
                ref.repo,
                path,
                content_b64,
                message=message,
                branch=branch,
                sha=sha,
            )
        except GitHubAPIError as exc:
            raise UploadError(path, exc.message) from exc

        logger.debug(
            "Wrote %s to %s@%s (%s)", path, ref.full_name, branch, "update" if sha else "create",
        )

    def _existing_sha(self, ref: RepositoryRef, path: str, branch: str) -> Optional[str]:
        """Version token of the file at *path*, or None when it does not exist."""
        try:
            data = self.client.get_contents(ref.owner, ref.repo, path, ref=branch)
        except GitHubAPIError as exc:
            if exc.status_code == 404:
                return None
            raise
        return data.get("sha")
