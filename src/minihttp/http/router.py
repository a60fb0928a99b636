"""
=============================================================================
REQUEST ROUTER
=============================================================================

Maps a parsed request to one response-producing handler.

=============================================================================
ROUTING ARCHITECTURE
=============================================================================

Routes live in an ORDERED table. Each entry pairs an HTTP method and a
predicate over the request with the handler to run:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request: GET /echo/hello                                  │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  Route table (evaluated top to bottom)                       │   │
    │   │                                                              │   │
    │   │  GET  target == "/"                → root                    │   │
    │   │  GET  segment[1] == "user-agent"   → user_agent              │   │
    │   │  GET  segment[1] == "echo", len>2  → echo        ← MATCH!    │   │
    │   │  GET  segment[1] == "files", ...   → read_file               │   │
    │   │  POST segment[1] == "files", len>2 → write_file              │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request)                                                      │
    │                                                                      │
    │   No entry matches → 404 Not Found, empty body                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

First match wins, so precedence is simply registration order. Each
predicate can be tested on its own, and the table reads top to bottom
exactly as the dispatch happens.

=============================================================================
PREDICATES
=============================================================================

Predicates look at path segments rather than compiling patterns, because
the routes are defined by segment shape:

    target_is("/")                       "/" only
    segment_is(1, "user-agent")          "/user-agent", "/user-agent/x"
    segment_is(1, "echo", min_len=3)     "/echo/<text>" (and deeper)

    all_of(p1, p2, ...)                  every predicate must hold

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


# =============================================================================
# TYPE ALIASES
# =============================================================================

# Handler: takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]

# Predicate: decides whether a route applies to a request
Predicate = Callable[[HTTPRequest], bool]


# =============================================================================
# PREDICATE HELPERS
# =============================================================================

def target_is(target: str) -> Predicate:
    """Match requests whose raw target equals `target` exactly."""
    def predicate(request: HTTPRequest) -> bool:
        return request.target == target
    return predicate


def segment_is(index: int, value: str, min_len: int = 0) -> Predicate:
    """
    Match requests whose segment at `index` equals `value`.

    Args:
        index: Segment position (0 is the empty part before the first "/")
        value: Expected segment text
        min_len: Minimum number of segments required. A path shorter than
                 `index + 1` never matches regardless of this value.
    """
    def predicate(request: HTTPRequest) -> bool:
        segments = request.segments
        if len(segments) <= index or len(segments) < min_len:
            return False
        return segments[index] == value
    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    """Combine predicates; all must hold (evaluated left to right)."""
    def predicate(request: HTTPRequest) -> bool:
        return all(p(request) for p in predicates)
    return predicate


@dataclass
class Route:
    """
    One entry of the routing table.

        Route(
            method="GET",              # Exact method the route serves
            predicate=target_is("/"),  # Shape check on the request
            handler=root,              # Behaviour to run on match
            name="root",               # For logs and debugging
        )
    """

    method: str
    predicate: Predicate
    handler: Handler
    name: Optional[str] = None

    def matches(self, request: HTTPRequest) -> bool:
        """True when both the method and the predicate accept the request."""
        return request.method == self.method and self.predicate(request)


class Router:
    """
    HTTP request router over an ordered route table.

    ==========================================================================
    DECORATOR-BASED API
    ==========================================================================

        router = Router()

        @router.get(target_is("/"), name="root")
        def root(request):
            return ok()

        @router.get(segment_is(1, "echo", min_len=3), name="echo")
        def echo(request):
            return ok(request.segment(2))

    ==========================================================================
    FALLTHROUGH
    ==========================================================================

    A request no route accepts is answered with a bare 404. That covers
    unknown paths, unknown methods, malformed request lines and POSTs to
    anything other than /files/<name>.

    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: str,
        predicate: Predicate,
        handler: Handler,
        name: Optional[str] = None,
    ) -> Route:
        """
        Append a route to the end of the table (lowest precedence so far).

        Args:
            method: HTTP method, e.g. "GET"
            predicate: Request shape check
            handler: Function that takes request, returns response
            name: Optional label for logging

        Returns:
            The registered Route object
        """
        route = Route(
            method=method.upper(),
            predicate=predicate,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
        )
        self._routes.append(route)
        return route

    def route(
        self,
        method: str,
        predicate: Predicate,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Returns the handler unchanged so decorators can be stacked.
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, predicate, handler, name)
            return handler
        return decorator

    def get(self, predicate: Predicate, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route("GET", predicate, name)

    def post(self, predicate: Predicate, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route("POST", predicate, name)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, request: HTTPRequest) -> Optional[Route]:
        """
        Find the first route accepting the request.

        Returns:
            The matching Route, or None
        """
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        This is the final handler wrapped by the middleware pipeline.

        Returns:
            Handler response, or a bare 404 if nothing matched
        """
        route = self.match(request)
        if route is None:
            return not_found()
        return route.handler(request)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """Get the registered routes in precedence order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
