"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server answers with a closed set of four status codes:

    ┌───────┬────────────────────────┬──────────────────────────────────┐
    │ Code  │ Reason phrase          │ Produced by                      │
    ├───────┼────────────────────────┼──────────────────────────────────┤
    │  200  │ OK                     │ /, /user-agent, /echo, GET files │
    │  201  │ Created                │ POST /files/<name>               │
    │  404  │ Not Found              │ unknown routes, missing files    │
    │  500  │ Internal Server Error  │ filesystem or handler failures   │
    └───────┴────────────────────────┴──────────────────────────────────┘

The reason phrase is the text after the code in the status line:

    HTTP/1.1 200 OK
             ─── ──
              │   │
              │   └── Reason phrase
              └────── Status code

Any code outside the table serializes with the phrase "Unknown".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes the server can produce.

    IntEnum so members compare and format as plain integers:
        HTTPStatus.OK == 200        → True
        f"{HTTPStatus.NOT_FOUND}"   → "404"
    """

    OK = 200
    CREATED = 201
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return reason_phrase(self)

    @property
    def is_success(self) -> bool:
        """True for 2xx codes."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    200: "OK",
    201: "Created",
    404: "Not Found",
    500: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Get the reason phrase for a status code.

    Args:
        code: Integer status code (an HTTPStatus works too).

    Returns:
        The phrase, or "Unknown" for codes outside the closed set.
    """
    return _STATUS_PHRASES.get(int(code), "Unknown")
