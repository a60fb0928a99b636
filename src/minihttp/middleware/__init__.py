"""
=============================================================================
MIDDLEWARE PACKAGE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Middleware             │ Purpose                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ LoggingMiddleware      │ One access log line per request            │
    │ CompressionMiddleware  │ gzip Content-Encoding negotiation          │
    └─────────────────────────────────────────────────────────────────────┘

Usage:

    pipeline = MiddlewarePipeline()
    pipeline.use(LoggingMiddleware(), CompressionMiddleware())
    handler = pipeline.wrap(router.handle)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .compression import CompressionMiddleware, accepts_gzip, negotiate_encoding
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "CompressionMiddleware",
    "accepts_gzip",
    "negotiate_encoding",
    "LoggingMiddleware",
    "RequestLog",
]
