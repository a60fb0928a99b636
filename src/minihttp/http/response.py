"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                    ← status line             │
    │    Content-Type: text/plain\r\n           ← headers (any order)     │
    │    Content-Length: 5\r\n                                             │
    │    \r\n                                   ← blank line              │
    │    hello                                  ← body bytes              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the headers set on the response are written. Nothing is added
behind the caller's back, so a bare 404 is exactly:

    HTTP/1.1 404 Not Found\r\n\r\n

=============================================================================
BUILDER PATTERN
=============================================================================

HTTPResponse is an immutable value. Handlers assemble one with the
fluent ResponseBuilder; later stages (compression) derive a NEW response
with HTTPResponse.replace() instead of mutating it.

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .text("hello")
        .build())

Body-setting methods keep Content-Length equal to len(body) whenever
the body is non-empty. An empty body carries no Content-Length.

=============================================================================
"""

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from .status_codes import HTTPStatus, reason_phrase


CRLF = "\r\n"
HTTP_VERSION = "HTTP/1.1"
WIRE_ENCODING = "latin-1"

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler builds          Negotiator may          to_bytes()
        HTTPResponse   ─────►   derive a gzip   ─────►  serializes
                                copy                    for the socket

    Headers are copied into a read-only mapping on construction, so a
    response cannot change after it is built.

    =========================================================================
    """

    status: int = HTTPStatus.OK
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{HTTP_VERSION} {int(self.status)} {reason_phrase(self.status)}"

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a header set on this response."""
        return self.headers.get(name, default)

    def replace(self, **changes) -> "HTTPResponse":
        """
        Return a copy with the given fields changed.

        Example:
            gzipped = response.replace(body=compressed, headers=new_headers)
        """
        return dataclasses.replace(self, **changes)

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            "HTTP/1.1 " code " " phrase CRLF
            (name ": " value CRLF)*
            CRLF
            body

        =====================================================================

        Returns:
            Complete HTTP response, ready for socket.sendall()
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        head = CRLF.join(lines) + CRLF + CRLF
        return head.encode(WIRE_ENCODING, errors="replace") + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    ==========================================================================
    METHOD CHAINING (FLUENT INTERFACE)
    ==========================================================================

    Each method returns `self`, enabling chaining:

        builder.status(201).header("Location", "/files/a").build()
        ────────┬──────────────┬─────────────────────────────┬───
                └──────────────┴─────────────────────────────┘
                         All return 'self' except build()

    ==========================================================================
    USAGE EXAMPLES
    ==========================================================================

    # Echo a path segment
    response = ResponseBuilder().text("hello").build()

    # Serve file contents
    response = ResponseBuilder().octet_stream(data).build()

    # Status-only response
    response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()

    ==========================================================================
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS METHODS
    # =========================================================================

    def status(self, status: int) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    # =========================================================================
    # HEADER METHODS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def headers(self, headers: Mapping[str, str]) -> "ResponseBuilder":
        """Add multiple headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body (raw bytes or string).

        Strings are encoded as latin-1, the same byte-per-character
        mapping the parser decodes with, so text taken from the request
        goes back on the wire unchanged. Content-Length is set to the
        byte length for a non-empty body and removed for an empty one.

        Args:
            body: Response body

        Returns:
            Self for method chaining
        """
        if isinstance(body, str):
            body = body.encode(WIRE_ENCODING)
        self._body = body

        if body:
            self._headers["Content-Length"] = str(len(body))
        else:
            self._headers.pop("Content-Length", None)
        return self

    def text(self, text: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set a plain text body with Content-Type: text/plain.

        An empty text still advertises the type (GET /user-agent with no
        User-Agent header answers an empty text/plain body).
        """
        self.content_type(TEXT_PLAIN)
        return self.body(text)

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Set a binary body with Content-Type: application/octet-stream."""
        self.content_type(OCTET_STREAM)
        return self.body(content)

    def location(self, url: str) -> "ResponseBuilder":
        """Set the Location header (used with 201 Created)."""
        return self.header("Location", url)

    # =========================================================================
    # BUILD METHODS
    # =========================================================================

    def build(self) -> HTTPResponse:
        """
        Build the immutable HTTPResponse.

        The builder's header dict is copied, so reusing the builder
        cannot change a response that was already built.
        """
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Quick one-liners for the responses the route handlers produce.
#
#     return ok()                       # 200, no headers
#     return ok("hello")                # 200, text/plain
#     return created("/files/a.txt")    # 201 + Location
#     return not_found()                # 404, no headers
#
# =============================================================================

def ok(text: Optional[Union[str, bytes]] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    Args:
        text: Plain-text body. None gives a bare status-only response.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if text is not None:
        builder.text(text)
    return builder.build()


def created(location: Optional[str] = None) -> HTTPResponse:
    """Create a 201 Created response, optionally with a Location header."""
    builder = ResponseBuilder().status(HTTPStatus.CREATED)
    if location:
        builder.location(location)
    return builder.build()


def not_found() -> HTTPResponse:
    """Create a bare 404 Not Found response."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def internal_error() -> HTTPResponse:
    """Create a bare 500 Internal Server Error response."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
