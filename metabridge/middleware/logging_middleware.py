"""
HTTP request logging middleware.

Every request gets a request id; requests to the bridge routes also carry the
bridge operation they trigger, so ``invalid_bridge_response`` diagnostics
logged while serving them can be grouped per endpoint.
"""

import time
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

_BRIDGE_OPERATIONS = (
    ("/bridge/feature-flags", "fetchBridgeFeatureFlags"),
    ("/bridge/tokens/", "fetchBridgeTokens"),
    ("/bridge/quotes", "fetchBridgeQuotes"),
)


def bridge_operation_for(path: str) -> Optional[str]:
    """Name of the bridge fetch behind ``path``, or None for non-bridge routes."""
    for prefix, operation in _BRIDGE_OPERATIONS:
        if path == prefix or (prefix.endswith("/") and path.startswith(prefix)):
            return operation
    return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests with timing, status, request id and bridge operation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        operation = bridge_operation_for(request.url.path)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        if operation:
            structlog.contextvars.bind_contextvars(bridge_operation=operation)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                bridge_operation=operation,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
