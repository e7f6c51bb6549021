"""Pre-flight check that a token can reach the target repository.

Runs before any write of an upload, and standalone behind
``POST /api/github/validate``.
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..exceptions import (
    InvalidCredentialError,
    InvalidReferenceError,
    NotFoundOrNoAccessError,
    RemoteError,
)
from .github_client import GitHubAPIError, GitHubClient

logger = logging.getLogger(__name__)

_GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})

# git@github.com:<owner>/<repo>[.git]
_SSH_URL_RE = re.compile(r"^git@github\.com:([^/\s]+)/([^/\s]+?)/?$")


@dataclass(frozen=True)
class RepositoryRef:
    """Owner and repository name parsed from a repository URL."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repository_url(repository_url: str) -> RepositoryRef:
    """Extract (owner, repo) from a GitHub URL, stripping a trailing ``.git``.

    The host must be exactly ``github.com`` (or ``www.``); anything after
    owner/repo in the path is ignored.

    Raises:
        InvalidReferenceError: If the URL has no owner/repo pair.
    """
    url = (repository_url or "").strip()

    ssh = _SSH_URL_RE.match(url)
    if ssh:
        owner, repo = ssh.group(1), ssh.group(2)
    else:
        try:
            parts = urlsplit(url)
            host = (parts.hostname or "").lower()
        except ValueError as e:
            raise InvalidReferenceError(repository_url) from e
        if parts.scheme not in ("http", "https") or host not in _GITHUB_HOSTS:
            raise InvalidReferenceError(repository_url)
        segments = [s for s in parts.path.split("/") if s]
        if len(segments) < 2:
            raise InvalidReferenceError(repository_url)
        owner, repo = segments[0], segments[1]

    if repo.endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        raise InvalidReferenceError(repository_url)
    return RepositoryRef(owner=owner, repo=repo)


def validate_access(client: GitHubClient, repository_url: str) -> RepositoryRef:
    """Parse *repository_url* and confirm the client's token can read it.

    Raises:
        InvalidReferenceError: URL is not owner/repo shaped.
        InvalidCredentialError: GitHub answered 401.
        NotFoundOrNoAccessError: GitHub answered 404.
        RemoteError: Any other GitHub failure.
    """
    ref = parse_repository_url(repository_url)

    try:
        client.get_repository(ref.owner, ref.repo)
    except GitHubAPIError as exc:
        logger.info(
            "Repository access check failed for %s: HTTP %s",
            ref.full_name, exc.status_code,
        )
        if exc.status_code == 401:
            raise InvalidCredentialError() from exc
        if exc.status_code == 404:
            raise NotFoundOrNoAccessError(ref.owner, ref.repo) from exc
        raise RemoteError(exc.message, remote_status=exc.status_code) from exc

    logger.debug("Repository access verified for %s", ref.full_name)
    return ref
