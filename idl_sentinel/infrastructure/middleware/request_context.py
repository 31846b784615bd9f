"""Request context middleware for correlation IDs and HTTP metrics."""

import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from idl_sentinel.infrastructure.telemetry.logging import (
    clear_request_context,
    set_request_context,
)
from idl_sentinel.infrastructure.telemetry.metrics import record_http_request


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets up request context for logging and records request metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())

        set_request_context(request_id=request_id)
        request.state.request_id = request_id
        started = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            # Route templates keep label cardinality bounded
            route = request.scope.get("route")
            endpoint = getattr(route, "path", None) or "unmatched"
            record_http_request(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                duration_seconds=time.perf_counter() - started,
            )
            clear_request_context()
