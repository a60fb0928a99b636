"""
Unit tests for HTTP request parsing.
"""

from minihttp.http.request import HTTPRequest, RequestParser, parse_request


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.target == "/echo/hello"
        assert request.segments == ["", "echo", "hello"]
        assert request.body == b""
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed correctly."""
        request = parse_request(sample_get_request)

        assert request.headers["Host"] == "localhost:4221"
        assert request.user_agent == "pytest"
        assert request.headers["Accept"] == "*/*"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test that the body is every byte after the blank line."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.segments == ["", "files", "notes.txt"]
        assert request.body == b"hello, file"

    def test_body_keeps_crlf_and_binary(self):
        """Test that bodies containing CRLF and non-ASCII bytes survive."""
        body = b"line1\r\nline2\r\n\r\n\x00\xff\xfe"
        raw = b"POST /files/x HTTP/1.1\r\nHost: t\r\n\r\n" + body

        assert parse_request(raw).body == body

    def test_root_target(self):
        """Test that "/" gives two empty segments, not an empty path."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.target == "/"
        assert request.segments == ["", ""]

    def test_segments_never_empty(self):
        """Test that splitting always yields at least one segment."""
        request = parse_request(b"")

        assert request.method == ""
        assert request.target == ""
        assert request.segments == [""]

    def test_parse_invalid_request_line(self):
        """Test that a one-word request line does not raise."""
        request = parse_request(b"GET\r\nHost: test\r\n\r\n")

        assert request.method == "GET"
        assert request.target == ""
        assert request.headers == {"Host": "test"}

    def test_no_header_terminator(self):
        """Test input with no blank line: all header text, no body."""
        request = parse_request(b"GET /echo/abc HTTP/1.1\r\nUser-Agent: x")

        assert request.segments == ["", "echo", "abc"]
        assert request.user_agent == "x"
        assert request.body == b""

    def test_non_ascii_bytes_do_not_raise(self):
        """Test that undecodable UTF-8 in the header block is accepted."""
        request = parse_request(b"GET /echo/\xff\xfe HTTP/1.1\r\n\r\n")

        assert request.segment(2) == "\xff\xfe"


class TestHeaderParsing:
    """Tests for header rules."""

    def test_first_occurrence_wins(self):
        """Test duplicate header names keep the first value."""
        raw = b"GET / HTTP/1.1\r\nX-Tag: a\r\nX-Tag: b\r\n\r\n"

        assert parse_request(raw).get_header("X-Tag") == "a"

    def test_names_are_case_sensitive(self):
        """Test that header lookup does not fold case."""
        raw = b"GET / HTTP/1.1\r\nuser-agent: lower\r\n\r\n"
        request = parse_request(raw)

        assert request.user_agent == ""
        assert request.get_header("user-agent") == "lower"

    def test_value_after_first_separator(self):
        """Test that only the first ": " splits name from value."""
        raw = b"GET / HTTP/1.1\r\nReferer: http://x: y\r\n\r\n"

        assert parse_request(raw).get_header("Referer") == "http://x: y"

    def test_malformed_lines_skipped(self):
        """Test that lines without ": " are ignored."""
        raw = b"GET / HTTP/1.1\r\nGarbage\r\nNoSpace:value\r\nOk: yes\r\n\r\n"

        assert parse_request(raw).headers == {"Ok": "yes"}

    def test_missing_header_is_empty_string(self):
        """Test that a missing header reads as ""."""
        request = parse_request(b"GET /user-agent HTTP/1.1\r\n\r\n")

        assert request.user_agent == ""
        assert request.get_header("Accept-Encoding") == ""
        assert request.get_header("X-Missing", "dflt") == "dflt"

    def test_body_lines_are_not_headers(self):
        """Test that "Name: value" text in the body is not a header."""
        raw = b"POST /files/a HTTP/1.1\r\n\r\nUser-Agent: body"
        request = parse_request(raw)

        assert request.user_agent == ""
        assert request.body == b"User-Agent: body"


class TestHTTPRequest:
    """Tests for HTTPRequest accessors."""

    def test_segment_out_of_range(self):
        """Test that segment() returns "" past the end."""
        request = HTTPRequest(method="GET", target="/echo", segments=["", "echo"])

        assert request.segment(1) == "echo"
        assert request.segment(2) == ""
        assert request.segment(10) == ""

    def test_accept_encoding(self):
        """Test the Accept-Encoding shortcut."""
        request = HTTPRequest(
            method="GET",
            target="/",
            headers={"Accept-Encoding": "gzip, br"},
        )

        assert request.accept_encoding == "gzip, br"
