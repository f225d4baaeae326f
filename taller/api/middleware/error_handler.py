"""
Error responses for the pipeline API.

Every failure leaves the API as an ``ErrorResponse`` body: a stable
``error_code``, the message, a recovery ``hint`` and structured ``details``
(for a rejected gate, every missing field or stock shortfall at once).
"""

import traceback
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from taller.application.dto.responses import ErrorResponse
from taller.config import get_logger
from taller.core.exceptions import (
    CafConflictError,
    ConfigurationError,
    DocumentBuildError,
    InvalidStateError,
    NotFoundError,
    OutOfFoliosError,
    TallerError,
    TransactionFailedError,
    ValidationError,
    ValidationFailedError,
)

logger = get_logger(__name__)

# First match wins, so subclasses (AlreadyInvoiced, InsufficientStock) follow their base
ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (CafConflictError, status.HTTP_409_CONFLICT),
    (OutOfFoliosError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ValidationFailedError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DocumentBuildError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (TransactionFailedError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_400_BAD_REQUEST),
)

ERROR_HINTS: dict[str, str] = {
    "NOT_FOUND": "Check the ID and the X-Tenant-ID header.",
    "INVALID_STATE": "Fetch the record's pipeline status to see which step comes next.",
    "ALREADY_CONVERTED": "The quotation already has a work order; continue from that work order.",
    "ALREADY_INVOICED": "The work order already carries an invoice.",
    "VALIDATION_FAILED": "Fix every entry in details.missing_fields and retry.",
    "INSUFFICIENT_STOCK": "Receive stock or reduce quantities; see details.shortfalls.",
    "OUT_OF_FOLIOS": "Upload a new CAF for this document type with POST /api/folios/caf.",
    "CAF_CONFLICT": "Folio ranges may not overlap and only one window per type may be open.",
    "DOCUMENT_BUILD_FAILED": "The invoice data cannot form a valid tax document.",
    "TRANSACTION_FAILED": "The database was busy or rejected the change. Retry the request.",
    "VALIDATION_ERROR": "Check the request body, path and headers against the API schema.",
}

FALLBACK_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "Nothing is served at this path.",
    409: "The record is not in a state that allows this operation.",
    413: "The request body is too large.",
    422: "The request could not be processed. Check the input.",
    500: "Unexpected server error. Check the server logs.",
    503: "Temporarily unavailable. Retry later.",
}

HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    422: "UNPROCESSABLE_ENTITY",
}


def _hint(error_code: str, status_code: int) -> str:
    return ERROR_HINTS.get(error_code) or FALLBACK_HINTS.get(status_code, "")


def _render(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_hint(error_code, status_code),
        details=details or {},
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain error, or any stray exception, as an ErrorResponse."""
    status_code = next(
        (code for exc_type, code in ERROR_STATUS if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if isinstance(exc, TallerError):
        error_code, message, details = exc.code, exc.message, exc.details
    else:
        error_code, message, details = type(exc).__name__, str(exc), None

    server_side = status_code >= 500
    (logger.error if server_side else logger.warning)(
        "request_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        status=status_code,
        error_code=error_code,
        error=message,
        traceback=traceback.format_exc() if server_side else None,
    )
    return _render(request, status_code, error_code, message, details)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catches whatever the exception handlers did not."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TallerError)
    async def handle_domain_error(request: Request, exc: TallerError) -> JSONResponse:
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Same shape as a rejected gate: one entry per offending field
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _render(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"missing_fields": problems},
        )

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return _render(
            request,
            exc.status_code,
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail) if exc.detail else "Request failed",
        )
