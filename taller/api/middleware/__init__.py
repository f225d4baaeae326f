"""API middleware."""

from taller.api.middleware.error_handler import ErrorHandlerMiddleware
from taller.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
