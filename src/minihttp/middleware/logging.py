"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per request on the "minihttp.access" logger:

    127.0.0.1 "GET /echo/hello" 200 5 0.42ms
    ───┬───── ───────┬──────── ─┬─ ┬ ───┬──
       │             │          │  │    └── time spent in the handler chain
       │             │          │  └── body bytes sent
       │             │          └── status code
       │             └── method and raw target
       └── client address

The middleware only observes. It never adds headers or touches the body,
so the bytes on the wire are exactly what the router and negotiator
produced.

Configure it separately from the rest of the server if needed:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

=============================================================================
"""

import time
import logging
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """One access log entry."""

    client_ip: str
    method: str
    target: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} "{self.method} {self.target}" '
            f'{self.status_code} {self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so the timing covers compression and
    the logged length is what the client receives.
    """

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.target} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        entry = RequestLog(
            client_ip=request.client_address[0],
            method=request.method,
            target=request.target,
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )
        logger.log(self.log_level, entry.to_text())

        return response
