"""Middleware infrastructure."""

from idl_sentinel.infrastructure.middleware.error_handler import error_handler_middleware
from idl_sentinel.infrastructure.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware", "error_handler_middleware"]
