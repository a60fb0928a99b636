"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router to post-process every response without the
handlers knowing about it (Chain of Responsibility).

    Request → [Logging] → [Compression] → Router → Handler
                                                     │
    Response ← [Logging] ← [Compression] ←───────────┘

Each middleware receives the request and a `next` callable. It may act
before calling next, after it, or both.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# NextHandler is the signature for the next middleware or final handler.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    =========================================================================
    THE MIDDLEWARE CONTRACT
    =========================================================================

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                # pre-processing
                response = next(request)
                # post-processing: derive a new response, never mutate
                return response.replace(headers={...})

    HTTPResponse is frozen, so post-processing returns a new value
    instead of editing the one it was given.

    =========================================================================
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (from next() or derived from it)
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added = outermost:

        pipeline.add(LoggingMiddleware())      # sees the final response
        pipeline.add(CompressionMiddleware())  # closest to the router

        handler = pipeline.wrap(router.handle)
        # LoggingMiddleware(CompressionMiddleware(router.handle))
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Add middleware to the pipeline.

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Add several middleware at once, outermost first."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with all middleware in the pipeline.

        Given [MW1, MW2] and handler the result is MW1 → MW2 → handler.
        Wrapping runs in reverse so the first-added middleware ends up
        outermost.

        Args:
            handler: The final request handler

        Returns:
            Wrapped handler function that includes all middleware
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
