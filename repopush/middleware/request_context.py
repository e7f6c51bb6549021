"""Request context middleware: request id, timing and access log.

All three concerns run in one pass. Upload throttling is not done here; it
is per GitHub token, see ``services.submission_limiter``.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Probes and job polling run constantly; log them at debug level only.
_QUIET_PATHS = frozenset({"/", "/health"})
_QUIET_GET_PREFIXES = ("/api/upload/",)


def is_quiet_path(method: str, path: str) -> bool:
    if path in _QUIET_PATHS:
        return True
    return method == "GET" and path.startswith(_QUIET_GET_PREFIXES)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing and access logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        quiet = is_quiet_path(request.method, request.url.path) and response.status_code < 400
        logger.log(
            logging.DEBUG if quiet else logging.INFO,
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response
