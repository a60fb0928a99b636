"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

Compresses response bodies with gzip when the client asks for it.

=============================================================================
HOW IT WORKS
=============================================================================

    Client sends:    Accept-Encoding: br,  gzip , deflate
                                       ─┬─  ──┬──  ───┬───
    Tokens (split on ",", stripped):  "br"  "gzip" "deflate"
                                             │
                                             └── exact, case-sensitive match

    Server responds:
        Content-Encoding: gzip
        Content-Length: <compressed length>
        <gzip bytes>

Only "gzip" is recognised. Other tokens ("br", "deflate", "identity",
"GZIP") are ignored rather than rejected, and a client that lists no
gzip token gets the response byte-for-byte unchanged.

Every response is compressed when gzip is accepted, including empty
bodies and 404s, so an accepting client always sees the same header set.
The body is compressed exactly once even if "gzip" is listed twice.

=============================================================================
"""

import gzip
import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

GZIP = "gzip"


def accepts_gzip(accept_encoding: str) -> bool:
    """
    Check an Accept-Encoding value for a gzip token.

    Example:
        accepts_gzip("deflate, gzip")   → True
        accepts_gzip("gzip;q=1.0")      → False (no parameter parsing)
        accepts_gzip("")                → False
    """
    return any(token.strip() == GZIP for token in accept_encoding.split(","))


def negotiate_encoding(
    accept_encoding: str,
    response: HTTPResponse,
    level: int = 9,
) -> HTTPResponse:
    """
    Apply gzip to a response if the client accepts it.

    Args:
        accept_encoding: Raw Accept-Encoding header value ("" if absent)
        response: Uncompressed response
        level: gzip compression level (1-9)

    Returns:
        A new gzip-encoded response, or `response` itself when gzip is not
        accepted or the response already carries a Content-Encoding.
    """
    if not accepts_gzip(accept_encoding):
        return response

    if "Content-Encoding" in response.headers:
        return response

    compressed = gzip.compress(response.body, compresslevel=level)
    logger.debug(f"gzip: {len(response.body)} -> {len(compressed)} bytes")

    headers = dict(response.headers)
    headers["Content-Encoding"] = GZIP
    headers["Content-Length"] = str(len(compressed))

    return response.replace(body=compressed, headers=headers)


class CompressionMiddleware(Middleware):
    """
    Response compression middleware.

    Place it innermost so it compresses exactly what the router built:

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())
    """

    def __init__(self, level: int = 9):
        """
        Args:
            level: Compression level (1 = fastest, 9 = smallest).
        """
        if not 1 <= level <= 9:
            raise ValueError(f"gzip level must be 1-9, got {level}")
        self.level = level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        response = next(request)
        return negotiate_encoding(request.accept_encoding, response, self.level)
