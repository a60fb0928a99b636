"""
Unit tests for the middleware pipeline and access logging.
"""

import logging

import pytest

from minihttp.http.request import HTTPRequest
from minihttp.http.response import ok
from minihttp.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


class Recorder(Middleware):
    """Records the order it runs in."""

    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:before")
        response = next(request)
        self.calls.append(f"{self.label}:after")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline class."""

    def test_first_added_is_outermost(self):
        calls = []
        pipeline = MiddlewarePipeline().use(Recorder("a", calls), Recorder("b", calls))

        def handler(request):
            calls.append("handler")
            return ok()

        pipeline.wrap(handler)(HTTPRequest(method="GET", target="/"))

        assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]

    def test_empty_pipeline_is_handler(self):
        handler = lambda r: ok("x")

        assert MiddlewarePipeline().wrap(handler) is handler

    def test_len_and_iter(self):
        a = Recorder("a", [])
        pipeline = MiddlewarePipeline().add(a)

        assert len(pipeline) == 1
        assert list(pipeline) == [a]


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware class."""

    def test_logs_access_line(self, caplog):
        middleware = LoggingMiddleware()
        request = HTTPRequest(
            method="GET",
            target="/echo/hello",
            client_address=("10.0.0.1", 4000),
        )

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            middleware(request, lambda r: ok("hello"))

        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert message.startswith('10.0.0.1 "GET /echo/hello" 200 5 ')
        assert message.endswith("ms")

    def test_does_not_alter_response(self):
        """Test that the response passes through unchanged."""
        original = ok("hello")

        response = LoggingMiddleware()(HTTPRequest(method="GET", target="/"), lambda r: original)

        assert response is original

    def test_logs_and_reraises_errors(self, caplog):
        def broken(request):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="minihttp.access"):
            with pytest.raises(RuntimeError):
                LoggingMiddleware()(HTTPRequest(method="GET", target="/x"), broken)

        assert "boom" in caplog.text
