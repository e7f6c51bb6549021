"""REST client for the GitHub contents API.

Covers exactly what an upload needs: read repository metadata, read a file's
metadata (for its ``sha``) and create-or-update a file. Every failure surfaces
as ``GitHubAPIError`` with the HTTP status and GitHub's own message, so the
callers can map statuses to their own errors.

Transient failures are retried a bounded number of times with exponential
backoff. Reads are retried on connection errors, timeouts, 5xx and 429.
Writes may already have been applied when the answer is lost, so a PUT is
retried only when it never reached GitHub (connection refused, connect
timeout) or was refused with 429. Other client errors are never retried.
"""

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..core.config import settings

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


class GitHubAPIError(Exception):
    """Raised when a GitHub API call fails.

    ``status_code`` is 0 when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _is_transient(status_code: int, idempotent: bool = True) -> bool:
    if status_code == 429:
        return True
    return idempotent and status_code >= 500


def _never_sent(exc: requests.exceptions.RequestException) -> bool:
    """True when the request cannot have reached GitHub.

    ``ConnectTimeout`` is a ``ConnectionError``; ``ReadTimeout`` is not.
    """
    return isinstance(exc, requests.exceptions.ConnectionError)


class GitHubClient:
    """Token-scoped client for one upload run.

    Args:
        token: Personal access token or app token used for every call.
        api_url: API base URL. Defaults to ``settings.github_api_url``.
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts on transient failures.
        retry_base_delay: First backoff delay; doubles on each retry.
        session: Optional pre-built ``requests.Session`` (tests inject one).
    """

    def __init__(
        self,
        token: str,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.github_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.github_max_retries
        self.retry_base_delay = (
            retry_base_delay if retry_base_delay is not None else settings.github_retry_base_delay
        )
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": API_VERSION,
        })

    # ----- operations ------------------------------------------------------

    def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        """GET /repos/{owner}/{repo}."""
        return self._request("GET", f"/repos/{quote(owner)}/{quote(repo)}")

    def get_contents(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> Dict[str, Any]:
        """GET /repos/{owner}/{repo}/contents/{path}.

        Returns the decoded JSON. For a directory GitHub answers with a list,
        which is wrapped as ``{"entries": [...]}`` so callers always get a dict.
        """
        params = {"ref": ref} if ref else None
        data = self._request("GET", self._contents_path(owner, repo, path), params=params)
        if isinstance(data, list):
            return {"entries": data}
        return data

    def put_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        content_b64: str,
        message: str,
        branch: Optional[str] = None,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """PUT /repos/{owner}/{repo}/contents/{path}.

        ``sha`` turns the call into an update of the existing file; GitHub
        rejects a write to an existing path without it.
        """
        body: Dict[str, Any] = {"message": message, "content": content_b64}
        if branch:
            body["branch"] = branch
        if sha:
            body["sha"] = sha
        return self._request("PUT", self._contents_path(owner, repo, path), idempotent=False, json=body)

    def close(self) -> None:
        self._session.close()

    # ----- internal --------------------------------------------------------

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        return f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path.lstrip('/'))}"

    def _request(self, method: str, path: str, idempotent: bool = True, **kwargs: Any) -> Any:
        url = f"{self.api_url}{path}"
        attempts = self.max_retries + 1

        last_error: Optional[GitHubAPIError] = None

        for attempt in range(attempts):
            try:
                response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.exceptions.RequestException as exc:
                last_error = GitHubAPIError(f"{type(exc).__name__}: {exc}")
                if not (idempotent or _never_sent(exc)):
                    raise last_error from exc
            else:
                if response.ok:
                    return response.json() if response.content else {}
                last_error = GitHubAPIError(_error_message(response), status_code=response.status_code)
                if not _is_transient(response.status_code, idempotent):
                    raise last_error

            if attempt < attempts - 1:
                delay = self.retry_base_delay * (2 ** attempt)
                logger.warning(
                    "GitHub %s %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    method, path, attempt + 1, attempts, delay, last_error.message,
                )
                time.sleep(delay)

        raise last_error  # type: ignore[misc]


def _error_message(response: requests.Response) -> str:
    """Extract GitHub's ``message`` field, falling back to the status line."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code} {response.reason or ''}".strip()
