"""Request middleware: trace id binding and access logging."""
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

TRACE_HEADER = "X-Request-ID"

logger = structlog.get_logger("bloom.access")


def get_trace_id(request: Request) -> str | None:
    return getattr(request.state, "trace_id", None)


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Bind a per-request trace id into structlog context and echo it back.

    Unhandled exceptions pass through to the server error handler, which
    sets the trace header on the 500 response itself.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        request.state.trace_id = trace_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(trace_id=trace_id)

        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[TRACE_HEADER] = trace_id
            return response
        finally:
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )
            structlog.contextvars.clear_contextvars()
