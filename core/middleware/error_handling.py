"""
Error handling middleware.

Every failure leaves the service in the same envelope:

    {"error": {"code", "message", "path", "method", ["details"], ["request_id"]}}

Messages are scrubbed of credentials and contact data before they are logged
or returned, so a failing request can never disclose what the disclosure
pipeline would have redacted.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from core.exceptions import DataIntegrityError, DomainError

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

# Credentials and subject contact data that must never appear in errors
SENSITIVE_PATTERNS = [
    re.compile(r'(?:access_|refresh_)?token["\s:=]+(?:bearer\s+)?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'(?:jwt_)?secret(?:_key)?["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:=]+(?:bearer\s+)?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'[\w.+-]+@[\w-]+\.[\w.-]+'),  # email
    re.compile(r'\+?\d[\d\s().-]{8,}\d'),  # phone
    re.compile(r'https?://(?:www\.)?(?:linkedin|github)\.com/\S+', re.IGNORECASE),
]

# (exception type, status, code, client message, log level) checked in order
BUILTIN_ERRORS = [
    (IntegrityError, status.HTTP_409_CONFLICT, "INTEGRITY_ERROR",
     "The request conflicts with a database constraint", logging.WARNING),
    (OperationalError, status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_ERROR",
     "Database temporarily unavailable", logging.ERROR),
    (SQLAlchemyError, status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR",
     "A database error occurred", logging.ERROR),
    (PermissionError, status.HTTP_403_FORBIDDEN, "PERMISSION_DENIED",
     "You don't have permission to perform this action", logging.WARNING),
    (TimeoutError, status.HTTP_504_GATEWAY_TIMEOUT, "TIMEOUT",
     "The request timed out", logging.ERROR),
]


def sanitize_error_message(message: Any) -> str:
    """Replace credentials and contact data in a message with a marker."""
    sanitized = str(message) if message is not None else ""
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub(REDACTED, sanitized)
    return sanitized


def get_safe_error_details(exc: Exception, include_details: bool = False) -> dict[str, Any]:
    """
    Sanitized description of an exception.

    The traceback is only included when ``include_details`` is set, which
    the middleware does in debug mode.
    """
    details = {
        "type": type(exc).__name__,
        "message": sanitize_error_message(str(exc)),
    }
    if include_details:
        details["traceback"] = sanitize_error_message(traceback.format_exc())
    return details


def error_envelope(
    code: str,
    message: str,
    path: str,
    method: str,
    details: Optional[Any] = None,
) -> dict[str, Any]:
    error = {
        "code": code,
        "message": message,
        "path": path,
        "method": method,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Field-level validation errors without echoing submitted values."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def log_domain_error(exc: DomainError, method: str, path: str) -> None:
    if isinstance(exc, DataIntegrityError):
        # str() carries the internal detail, the client only sees exc.message
        logger.error(
            f"Data integrity error: {method} {path} - {sanitize_error_message(str(exc))}",
            exc_info=exc,
        )
    else:
        logger.warning(
            f"Domain error: {method} {path} - "
            f"Code: {exc.code}, Message: {sanitize_error_message(exc.message)}"
        )


class ErrorHandlingMiddleware:
    """
    Outermost ASGI middleware that turns any escaped exception into the
    standard error envelope.

    Domain errors keep their own code and status; other exceptions map to
    generic codes and never expose their message unless it is a ValueError
    (invalid input) or ``debug`` is enabled.
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = await self._handle_exception(exc, scope)
            await response(scope, receive, send)

    async def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        path = scope.get("path", "unknown")
        method = scope.get("method", "unknown")
        details = None

        if isinstance(exc, DomainError):
            log_domain_error(exc, method, path)
            status_code, code, message = exc.status_code, exc.code, sanitize_error_message(exc.message)

        elif isinstance(exc, StarletteHTTPException):
            status_code, code = exc.status_code, "HTTP_EXCEPTION"
            message = sanitize_error_message(exc.detail)
            logger.warning(f"HTTP exception: {method} {path} - Status: {status_code}, Message: {message}")

        elif isinstance(exc, RequestValidationError):
            status_code, code = status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR"
            message = "Request validation failed"
            details = format_validation_errors(exc)
            logger.warning(f"Validation error: {method} {path} - {len(details)} error(s)")

        elif isinstance(exc, ValueError):
            status_code, code = status.HTTP_400_BAD_REQUEST, "INVALID_INPUT"
            message = sanitize_error_message(str(exc))
            logger.warning(f"Invalid input: {method} {path} - {message}")

        else:
            status_code, code = status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR"
            message = "An unexpected error occurred"
            level = logging.ERROR
            for exc_type, mapped_status, mapped_code, mapped_message, mapped_level in BUILTIN_ERRORS:
                if isinstance(exc, exc_type):
                    status_code, code, message, level = (
                        mapped_status, mapped_code, mapped_message, mapped_level,
                    )
                    break
            logger.log(
                level,
                f"{code}: {method} {path} - {type(exc).__name__}: "
                f"{sanitize_error_message(str(exc))}",
                exc_info=level >= logging.ERROR,
            )
            if self.debug:
                details = get_safe_error_details(exc, include_details=True)

        body = error_envelope(code, message, path, method, details)

        request_id = dict(scope.get("headers") or []).get(b"x-request-id")
        if request_id:
            body["error"]["request_id"] = request_id.decode()

        return JSONResponse(status_code=status_code, content=body)


def setup_error_handlers(app):
    """
    Register exception handlers that render the standard error envelope.

    Domain errors raised by services are handled here so they never reach
    the outer middleware as unhandled exceptions.
    """

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        log_domain_error(exc, request.method, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(
                exc.code,
                sanitize_error_message(exc.message),
                request.url.path,
                request.method,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(
                "HTTP_EXCEPTION",
                sanitize_error_message(exc.detail),
                request.url.path,
                request.method,
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_envelope(
                "VALIDATION_ERROR",
                "Request validation failed",
                request.url.path,
                request.method,
                format_validation_errors(exc),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(
                "INTERNAL_SERVER_ERROR",
                "An unexpected error occurred",
                request.url.path,
                request.method,
            ),
        )
