"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import RepoPushException, SubmissionRateLimitedError

logger = logging.getLogger(__name__)


async def repopush_exception_handler(request: Request, exc: RepoPushException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Client errors are logged at warning level, everything else at error.

    Args:
        request: FastAPI request object
        exc: RepoPushException instance

    Returns:
        JSONResponse with error details
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"RepoPushException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    headers = None
    if isinstance(exc, SubmissionRateLimitedError):
        headers = {"Retry-After": str(int(exc.retry_after) + 1)}

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers
    )
