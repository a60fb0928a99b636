"""
Unit tests for gzip Content-Encoding negotiation.
"""

import gzip

import pytest

from minihttp.http.request import HTTPRequest
from minihttp.http.response import ok, not_found
from minihttp.middleware.compression import (
    CompressionMiddleware,
    accepts_gzip,
    negotiate_encoding,
)


class TestAcceptsGzip:
    """Tests for Accept-Encoding token matching."""

    @pytest.mark.parametrize("value", [
        "gzip",
        "gzip, deflate",
        "br, gzip",
        "  gzip  ",
        "deflate,gzip,br",
        "gzip, gzip",
    ])
    def test_accepted(self, value):
        assert accepts_gzip(value)

    @pytest.mark.parametrize("value", [
        "",
        "deflate",
        "br, identity",
        "GZIP",
        "x-gzip",
        "gzip;q=1.0",
        "gzipped",
    ])
    def test_not_accepted(self, value):
        assert not accepts_gzip(value)


class TestNegotiateEncoding:
    """Tests for negotiate_encoding()."""

    def test_compresses_body(self):
        """Test gzip body, Content-Encoding and compressed Content-Length."""
        original = ok("hello " * 50)

        response = negotiate_encoding("gzip", original)

        assert response.get_header("Content-Encoding") == "gzip"
        assert gzip.decompress(response.body) == original.body
        assert response.get_header("Content-Length") == str(len(response.body))
        assert response.get_header("Content-Type") == "text/plain"

    def test_no_gzip_passes_through(self):
        """Test that the same response object comes back untouched."""
        original = ok("hello")

        assert negotiate_encoding("deflate, br", original) is original
        assert negotiate_encoding("", original) is original

    def test_original_not_modified(self):
        """Test that negotiation derives a new response."""
        original = ok("hello")

        negotiate_encoding("gzip", original)

        assert original.body == b"hello"
        assert "Content-Encoding" not in original.headers

    def test_empty_body_is_compressed(self):
        """Test that an empty 404 still gets a gzip member."""
        response = negotiate_encoding("gzip", not_found())

        assert response.status == 404
        assert gzip.decompress(response.body) == b""
        assert response.get_header("Content-Length") == str(len(response.body))

    def test_compresses_once(self):
        """Test that gzip listed twice still compresses a single time."""
        response = negotiate_encoding("gzip, gzip", ok("abc"))

        assert gzip.decompress(response.body) == b"abc"

    def test_already_encoded_left_alone(self):
        """Test that a response with Content-Encoding is not re-compressed."""
        once = negotiate_encoding("gzip", ok("abc"))

        assert negotiate_encoding("gzip", once) is once


class TestCompressionMiddleware:
    """Tests for CompressionMiddleware class."""

    def test_uses_request_header(self):
        """Test that the middleware reads Accept-Encoding from the request."""
        middleware = CompressionMiddleware()
        request = HTTPRequest(
            method="GET",
            target="/echo/abc",
            headers={"Accept-Encoding": "br, gzip"},
        )

        response = middleware(request, lambda r: ok("abc"))

        assert gzip.decompress(response.body) == b"abc"

    def test_without_header(self):
        middleware = CompressionMiddleware()
        request = HTTPRequest(method="GET", target="/")

        response = middleware(request, lambda r: ok("abc"))

        assert response.body == b"abc"

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            CompressionMiddleware(level=0)
