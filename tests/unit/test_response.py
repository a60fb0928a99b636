"""
Unit tests for HTTP response building and serialization.
"""

import pytest

from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    created,
    not_found,
    internal_error,
)
from minihttp.http.status_codes import HTTPStatus, reason_phrase


class TestStatusCodes:
    """Tests for status codes and reason phrases."""

    @pytest.mark.parametrize("code,phrase", [
        (200, "OK"),
        (201, "Created"),
        (404, "Not Found"),
        (500, "Internal Server Error"),
    ])
    def test_reason_phrases(self, code, phrase):
        """Test the phrase for each known code."""
        assert reason_phrase(code) == phrase

    def test_unknown_code(self):
        """Test the fallback phrase."""
        assert reason_phrase(418) == "Unknown"

    def test_enum_formats_as_int(self):
        """Test that HTTPStatus behaves like its integer value."""
        assert HTTPStatus.NOT_FOUND == 404
        assert f"{HTTPStatus.CREATED}" == "201"
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_text_sets_headers(self):
        """Test that text() sets Content-Type and Content-Length."""
        response = ResponseBuilder().text("hello").build()

        assert response.status == 200
        assert response.body == b"hello"
        assert response.headers == {
            "Content-Type": "text/plain",
            "Content-Length": "5",
        }

    def test_content_length_is_byte_length(self):
        """Test Content-Length counts bytes, not characters."""
        response = ResponseBuilder().octet_stream(b"\x00\x01\x02").build()

        assert response.get_header("Content-Length") == "3"
        assert response.get_header("Content-Type") == "application/octet-stream"

    def test_empty_body_has_no_content_length(self):
        """Test that an empty body removes Content-Length."""
        response = ResponseBuilder().body(b"abc").body(b"").build()

        assert "Content-Length" not in response.headers

    def test_empty_text_keeps_content_type(self):
        """Test that an empty text body still declares text/plain."""
        response = ResponseBuilder().text("").build()

        assert response.headers == {"Content-Type": "text/plain"}

    def test_build_copies_headers(self):
        """Test that reusing a builder does not change built responses."""
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        builder.header("X-B", "2")

        assert "X-B" not in first.headers

    def test_status_and_location(self):
        """Test chaining status() and location()."""
        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .location("/files/a")
            .build())

        assert response.status == 201
        assert response.headers == {"Location": "/files/a"}


class TestHTTPResponse:
    """Tests for HTTPResponse serialization."""

    def test_bare_404_exact_bytes(self):
        """Test that a 404 serializes with no headers at all."""
        assert not_found().to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_bare_200(self):
        """Test ok() with no text."""
        assert ok().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_bare_500(self):
        """Test internal_error()."""
        assert internal_error().to_bytes() == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"

    def test_created_with_location(self):
        """Test 201 carries only Location."""
        data = created("/files/n").to_bytes()

        assert data == b"HTTP/1.1 201 Created\r\nLocation: /files/n\r\n\r\n"

    def test_text_response_bytes(self):
        """Test full serialization of a text response."""
        data = ok("hello").to_bytes()

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Type: text/plain\r\n" in data
        assert b"Content-Length: 5\r\n" in data
        assert data.endswith(b"\r\n\r\nhello")

    def test_unknown_status(self):
        """Test serialization of a code outside the closed set."""
        data = HTTPResponse(status=299).to_bytes()

        assert data == b"HTTP/1.1 299 Unknown\r\n\r\n"

    def test_binary_body_untouched(self):
        """Test that body bytes are appended verbatim."""
        body = bytes(range(256))
        data = ResponseBuilder().octet_stream(body).to_bytes()

        assert data.endswith(b"\r\n\r\n" + body)

    def test_latin1_text_round_trip(self):
        """Test that text decoded as latin-1 goes back out as the same bytes."""
        data = ok("\xff\xfe").to_bytes()

        assert data.endswith(b"\r\n\r\n\xff\xfe")
        assert b"Content-Length: 2\r\n" in data

    def test_response_is_immutable(self):
        """Test that fields cannot be reassigned."""
        response = ok("x")

        with pytest.raises(AttributeError):
            response.body = b"y"

    def test_headers_are_read_only(self):
        """Test that headers cannot be changed in place."""
        response = ok("x")

        with pytest.raises(TypeError):
            response.headers["X-Extra"] = "y"
        with pytest.raises(TypeError):
            del response.headers["Content-Length"]

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 1\r\n\r\nx"
        )

    def test_headers_copied_from_caller(self):
        """Test that the caller's dict does not leak into the response."""
        headers = {"Location": "/files/a"}
        response = HTTPResponse(status=HTTPStatus.CREATED, headers=headers)

        headers["X-Late"] = "1"

        assert response.headers == {"Location": "/files/a"}

    def test_replace_returns_new_response(self):
        """Test that replace() leaves the original unchanged."""
        original = ok("abc")
        changed = original.replace(body=b"z", headers={"Content-Length": "1"})

        assert original.body == b"abc"
        assert original.get_header("Content-Length") == "3"
        assert changed.body == b"z"
        assert changed.headers == {"Content-Length": "1"}
