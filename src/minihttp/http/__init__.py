"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

The request/response engine, independent of sockets and threads:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST (request.py)                                                │
    │ raw bytes → HTTPRequest(method, target, segments, headers, body)    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │ ordered (method, predicate, handler) table, first match wins        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │ immutable HTTPResponse + fluent ResponseBuilder → wire bytes        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │ 200 OK, 201 Created, 404 Not Found, 500 Internal Server Error       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,              # 200 OK
    created,         # 201 Created
    not_found,       # 404 Not Found
    internal_error,  # 500 Internal Server Error
)
from .router import Router, Route, target_is, segment_is, all_of
from .status_codes import HTTPStatus, reason_phrase

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "target_is",
    "segment_is",
    "all_of",

    # Status codes
    "HTTPStatus",
    "reason_phrase",
]
