"""Per-token cap on upload submissions.

Every accepted upload spends the submitter's GitHub quota: one repository
lookup plus one or two contents calls per file, and content creation is
subject to GitHub's secondary rate limits. Submissions are therefore counted
per token over a sliding window and refused with 429 once the cap is hit,
before any job is created.

Tokens are never used as keys directly; only a SHA-256 fingerprint is kept.
"""

import hashlib
import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from ..exceptions import SubmissionRateLimitedError

logger = logging.getLogger(__name__)


def token_fingerprint(token: str) -> str:
    """Stable, non-reversible key for a token."""
    return hashlib.sha256(token.encode()).hexdigest()[:16]


class SubmissionLimiter:
    """
    Sliding-window limiter keyed by token fingerprint.

    Args:
        max_submissions: Submissions allowed per token within the window.
            0 disables the limit.
        window_seconds: Length of the sliding window.
        clock: Monotonic time source (tests inject one).
    """

    def __init__(
        self,
        max_submissions: int,
        window_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_submissions = max_submissions
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def acquire(self, token: str, now: Optional[float] = None) -> None:
        """Record a submission for *token*.

        Raises:
            SubmissionRateLimitedError: If the token already used its
                allowance in the current window. Nothing is recorded then.
        """
        if self.max_submissions <= 0:
            return

        key = token_fingerprint(token)
        if now is None:
            now = self._clock()
        cutoff = now - self.window_seconds

        with self._lock:
            self._evict(cutoff)
            window = self._windows.setdefault(key, deque())
            if len(window) >= self.max_submissions:
                retry_after = window[0] + self.window_seconds - now
                logger.warning(
                    "Submission limit reached",
                    extra={"token_fingerprint": key, "retry_after": round(retry_after, 1)},
                )
                raise SubmissionRateLimitedError(retry_after, self.max_submissions, self.window_seconds)
            window.append(now)

    def _evict(self, cutoff: float) -> None:
        # Caller holds the lock.
        for key in list(self._windows):
            window = self._windows[key]
            while window and window[0] <= cutoff:
                window.popleft()
            if not window:
                del self._windows[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
