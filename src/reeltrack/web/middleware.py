"""Request logging middleware for Reeltrack.

Every request gets a correlation ID (taken from ``X-Correlation-ID`` or
generated) and has its method and path bound into the structlog context,
so events logged by route handlers, the store and the generation clients
can be tied back to the request that caused them. Health probes are
logged at debug level to keep polling noise out of the request log.

Example:
    >>> from fastapi import FastAPI
    >>> from reeltrack.web.middleware import RequestLoggingMiddleware
    >>>
    >>> app = FastAPI()
    >>> app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

import structlog
from starlette.middleware.base import BaseHTTPMiddleware

from reeltrack.logging import get_logger, set_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
QUIET_PATH_PREFIXES: tuple[str, ...] = ("/health",)


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with timing and a correlation ID.

    The correlation ID is echoed back on the response so clients can quote
    it when reporting a failed generation.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        set_correlation_id(correlation_id)
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)

        quiet = request.url.path.startswith(QUIET_PATH_PREFIXES)
        log = logger.debug if quiet else logger.info
        start_time = time.perf_counter()

        log("request_started", query=str(request.url.query) or None)
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration_ms=_elapsed_ms(start_time),
                error=str(exc),
                exc_info=True,
            )
            raise
        else:
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(start_time),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            set_correlation_id(None)
            # also drops project_id bound by generation handlers
            structlog.contextvars.clear_contextvars()
