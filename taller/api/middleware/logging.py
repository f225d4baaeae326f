"""Per-request logging with request ids."""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from taller.config import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log start and end of every request.

    The caller's ``X-Request-ID`` is reused when present, otherwise a short
    one is generated. It is bound to the log context for the request and
    echoed back with the elapsed time.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        clear_request_context()
        bind_request_context(request_id=request_id)

        started = time.perf_counter()
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            tenant_id=request.headers.get("X-Tenant-ID"),
        )
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            clear_request_context()

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(elapsed_ms, 2),
            request_id=request_id,
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response
