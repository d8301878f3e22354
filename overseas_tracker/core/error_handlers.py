"""
Exception handlers that turn every failure into the standard error body.

Tracker exceptions carry their own status and code. Framework errors
(request validation, unknown routes, wrong methods) are mapped onto the
same ErrorCode values so clients only ever parse one shape.
"""

import logging
import time
from collections import Counter
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from overseas_tracker.core.exceptions import ErrorCode, TrackerException, TransientStorageError
from overseas_tracker.schemas.base import StandardErrorResponse

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5
FREQUENCY_WARNING_EVERY = 10

HTTP_STATUS_CODES: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTHENTICATION_FAILED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.VERSION_CONFLICT,
    503: ErrorCode.STORAGE_UNAVAILABLE,
}


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "request_path": request.url.path,
        "request_method": request.method,
    }


class ErrorHandler:
    """Builds error responses and keeps per-code counters for /health."""

    def __init__(self):
        self.error_counts: Counter = Counter()
        self.last_error_time: Dict[str, float] = {}

    def respond(
        self,
        request: Request,
        status_code: int,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> JSONResponse:
        self._track_error(error_code)
        body = StandardErrorResponse(
            error_code=error_code.value,
            message=message,
            details=details or None,
            request_id=getattr(request.state, "request_id", "unknown"),
        )
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(mode="json"),
            headers=headers,
        )

    async def handle_tracker_exception(self, request: Request, exc: TrackerException) -> JSONResponse:
        context = _request_context(request)
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{type(exc).__name__} on {context['request_method']} {context['request_path']}: {exc.message}",
            extra={**context, "error_code": exc.error_code.value, "status_code": exc.status_code},
        )

        headers = None
        if isinstance(exc, TransientStorageError):
            headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}

        return self.respond(request, exc.status_code, exc.error_code, exc.message, exc.details, headers)

    async def handle_validation_error(self, request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Malformed bodies, bad query params and rejected dates all answer 400
        with one entry per offending field.
        """
        fields = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        logger.warning(
            f"Rejected request with {len(fields)} invalid field(s)",
            extra=_request_context(request),
        )
        return self.respond(
            request,
            400,
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            {"validation_errors": fields},
        )

    async def handle_http_exception(self, request: Request, exc: StarletteHTTPException) -> JSONResponse:
        error_code = HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_SERVER_ERROR)
        logger.info(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={**_request_context(request), "status_code": exc.status_code},
        )
        return self.respond(
            request, exc.status_code, error_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    async def handle_generic_exception(self, request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled {type(exc).__name__}: {exc}",
            exc_info=True,
            extra={**_request_context(request), "exception_type": type(exc).__name__},
        )
        return self.respond(
            request, 500, ErrorCode.INTERNAL_SERVER_ERROR, "An internal server error occurred"
        )

    def _track_error(self, error_code: ErrorCode) -> None:
        self.error_counts[error_code.value] += 1
        self.last_error_time[error_code.value] = time.time()

        # Conflicts are routine when two people edit the same trip
        if error_code is ErrorCode.VERSION_CONFLICT:
            return
        count = self.error_counts[error_code.value]
        if count % FREQUENCY_WARNING_EVERY == 0:
            logger.warning(f"{error_code.value} has now occurred {count} times")

    def get_error_statistics(self) -> Dict[str, Any]:
        cutoff = time.time() - 3600
        return {
            "error_counts": dict(self.error_counts),
            "recent_errors": {
                code: count
                for code, count in self.error_counts.items()
                if self.last_error_time.get(code, 0) > cutoff
            },
            "total_errors": sum(self.error_counts.values()),
        }


error_handler = ErrorHandler()


def setup_error_handlers(app: FastAPI) -> None:
    """Register the handlers on an application."""
    app.add_exception_handler(TrackerException, error_handler.handle_tracker_exception)
    app.add_exception_handler(RequestValidationError, error_handler.handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, error_handler.handle_http_exception)
    app.add_exception_handler(Exception, error_handler.handle_generic_exception)
