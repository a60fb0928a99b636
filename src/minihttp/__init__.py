"""
=============================================================================
MINIHTTP
=============================================================================

A minimal multi-threaded HTTP/1.1 server on raw sockets.

    GET  /                  200
    GET  /user-agent        200 text/plain, the User-Agent header
    GET  /echo/<text>       200 text/plain, <text>
    GET  /files/<name>      200 application/octet-stream, or 404
    POST /files/<name>      201 Location: /files/<name>, or 500
    anything else           404

Responses are gzip-encoded when the client sends Accept-Encoding: gzip.

Quick start:

    from minihttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(directory="/tmp/files")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app

__all__ = [
    "__version__",
    "ServerConfig",
    "HTTPServer",
    "create_app",
]
