"""
=============================================================================
BASIC HANDLERS
=============================================================================

The three stateless routes:

    GET /               → 200, no headers, no body
    GET /user-agent     → 200, text/plain, body = User-Agent header
    GET /echo/<text>    → 200, text/plain, body = <text>

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """Liveness check: a bare 200."""
    return ok()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the caller's User-Agent header.

    A missing header is not an error. The body is then empty but the
    response is still 200 text/plain.
    """
    return ok(request.user_agent)


def echo(request: HTTPRequest) -> HTTPResponse:
    """Echo the path segment after /echo/ verbatim."""
    return ok(request.segment(2))
