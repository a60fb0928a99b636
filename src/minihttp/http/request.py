"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a connection into an HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /files/notes.txt HTTP/1.1\r\n      ← request line            │
    │   ─┬── ────────┬─────── ───┬────                                    │
    │    │           │           └── version (ignored)                    │
    │    │           └── target → segments ["", "files", "notes.txt"]    │
    │    └── method                                                        │
    │                                                                      │
    │   Host: localhost:4221\r\n                ← headers, "Name: value"  │
    │   User-Agent: curl/8.4.0\r\n                                         │
    │   Content-Length: 5\r\n                                              │
    │   \r\n                                    ← blank line              │
    │   hello                                   ← body                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. The parser is lenient and never raises: a request line
   with fewer than two words yields an empty method/target, which the
   router answers with 404.

2. Path segments come from splitting the target on "/". Splitting always
   produces at least one element, so "/" gives ["", ""] and an empty
   target gives [""].

3. Header names are case-sensitive and the FIRST occurrence of a name
   wins. The value is everything after the first ": " on the line; lines
   without ": " are skipped.

4. The body is every byte after the blank line that ends the headers,
   kept as bytes so uploads round-trip unchanged.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


CRLF = "\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_SEPARATOR = ": "


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES EXPLAINED
    =========================================================================

        method:         "GET", "POST", ... exactly as sent ("" if missing)

        target:         Raw request target, e.g. "/echo/hello"

        segments:       target split on "/", e.g. ["", "echo", "hello"]
                        Always at least one element.

        headers:        Name → value, case-sensitive names, first wins

        body:           Bytes after the header block (b"" for most GETs)

        client_address: (ip, port) of the client, for logging

    =========================================================================
    """

    method: str
    target: str
    segments: List[str] = field(default_factory=lambda: [""])
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: Tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        """The User-Agent header, or "" when the client sent none."""
        return self.get_header("User-Agent")

    @property
    def accept_encoding(self) -> str:
        """The raw Accept-Encoding header value, or ""."""
        return self.get_header("Accept-Encoding")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-sensitive lookup).

        A missing header is not an error: the default ("") is returned.

        Args:
            name: Header name, e.g. "User-Agent"
            default: Value to return if the header is absent

        Returns:
            Header value or default
        """
        return self.headers.get(name, default)

    def segment(self, index: int) -> str:
        """
        Get one path segment, or "" when the path is shorter.

        Example:
            /echo/hello → segment(1) == "echo", segment(2) == "hello"
        """
        if index < len(self.segments):
            return self.segments[index]
        return ""


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Split header block / body at the first \r\n\r\n              │
        │  2. Split header block on \r\n into lines                        │
        │  3. Line 0 → method, target (split on single spaces)             │
        │  4. Target → segments (split on "/")                             │
        │  5. Remaining lines → headers ("Name: value", first wins)        │
        │  6. Build HTTPRequest                                             │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest dataclass

    The header block is decoded as latin-1: every byte maps to one
    character, so decoding can never fail on odd client input.

    ==========================================================================
    """

    ENCODING = "latin-1"

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes from the socket.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest. Malformed input still produces a request.
        """
        # =====================================================================
        # STEP 1: Separate the header block from the body
        # =====================================================================
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            # No blank line: everything is header text, there is no body
            header_block = data
            body = b""
        else:
            header_block = data[:header_end]
            body = data[header_end + len(HEADER_TERMINATOR):]

        lines = header_block.decode(self.ENCODING).split(CRLF)

        # =====================================================================
        # STEP 2: Request line
        # =====================================================================
        method, target = self._parse_request_line(lines[0])

        # =====================================================================
        # STEP 3: Headers
        # =====================================================================
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            target=target,
            segments=target.split("/"),
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str]:
        """
        Split the request line into (method, target).

        Format: METHOD SP TARGET SP VERSION. The version is ignored.
        Missing words come back as "".
        """
        words = line.split(" ")
        method = words[0]
        target = words[1] if len(words) > 1 else ""
        return method, target

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        """
        Parse header lines into a dictionary.

        =====================================================================
        SPECIAL CASES HANDLED
        =====================================================================

        1. DUPLICATES: the first occurrence wins.
               "X-Tag: a" then "X-Tag: b" → {"X-Tag": "a"}

        2. MALFORMED LINES: a line without ": " is skipped.

        3. COLONS IN VALUES: only the first ": " separates.
               "Referer: http://x: y" → "http://x: y"

        =====================================================================
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                break  # Blank line ends the header block

            name, sep, value = line.partition(HEADER_SEPARATOR)
            if not sep:
                continue

            headers.setdefault(name, value)

        return headers


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0)
) -> HTTPRequest:
    """
    Convenience function to parse an HTTP request.

    Args:
        data: Raw HTTP request bytes.
        client_address: Client's (ip, port) tuple.

    Returns:
        Parsed HTTPRequest object.
    """
    return RequestParser().parse(data, client_address)
