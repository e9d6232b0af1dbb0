"""Request correlation: X-Request-Id propagation and one access log line per request."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

# Longer client-supplied ids are replaced rather than echoed.
MAX_REQUEST_ID_LENGTH = 128


def resolve_request_id(header_value: str | None) -> str:
    """Reuse the caller's id when it is usable, otherwise mint a UUID4."""
    if header_value and len(header_value) <= MAX_REQUEST_ID_LENGTH and header_value.isprintable():
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request_id/method/path into the structlog context for the whole request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-Id"))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        response.headers["X-Request-Id"] = request_id
        return response
