"""
Unit tests for HTTPServer.handle(): raw request bytes in, raw response out.
"""

import gzip

from minihttp import HTTPServer, ServerConfig
from minihttp.http.response import ok
from minihttp.http.router import Router, target_is


def make_server(files_dir, **kwargs) -> HTTPServer:
    return HTTPServer(ServerConfig(port=0, directory=str(files_dir)), **kwargs)


class TestHandle:
    """Tests for the socket-free protocol engine."""

    def test_echo_scenario(self, files_dir):
        data = make_server(files_dir).handle(b"GET /echo/hello HTTP/1.1\r\nHost: x\r\n\r\n")

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Length: 5\r\n" in data
        assert data.endswith(b"\r\n\r\nhello")

    def test_not_found_scenario(self, files_dir):
        data = make_server(files_dir).handle(b"GET /nope HTTP/1.1\r\n\r\n")

        assert data == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_root(self, files_dir):
        data = make_server(files_dir).handle(b"GET / HTTP/1.1\r\n\r\n")

        assert data == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_gzip(self, files_dir):
        data = make_server(files_dir).handle(
            b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n"
        )
        head, _, body = data.partition(b"\r\n\r\n")

        assert b"Content-Encoding: gzip" in head
        assert f"Content-Length: {len(body)}".encode() in head
        assert gzip.decompress(body) == b"abc"

    def test_handler_exception_is_bare_500(self, files_dir):
        router = Router()

        @router.get(target_is("/"))
        def crash(request):
            raise RuntimeError("handler bug")

        data = make_server(files_dir, router=router).handle(b"GET / HTTP/1.1\r\n\r\n")

        assert data == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"

    def test_custom_router(self, files_dir):
        router = Router()
        router.add_route("GET", target_is("/ping"), lambda r: ok("pong"))

        data = make_server(files_dir, router=router).handle(b"GET /ping HTTP/1.1\r\n\r\n")

        assert data.endswith(b"\r\n\r\npong")

    def test_post_then_get(self, files_dir):
        server = make_server(files_dir)

        created = server.handle(b"POST /files/a.bin HTTP/1.1\r\n\r\n\x00\xff")
        fetched = server.handle(b"GET /files/a.bin HTTP/1.1\r\n\r\n")

        assert created == b"HTTP/1.1 201 Created\r\nLocation: /files/a.bin\r\n\r\n"
        assert fetched.endswith(b"\r\n\r\n\x00\xff")
