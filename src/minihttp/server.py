"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together. One accepted connection goes through:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   ThreadPool.submit(_process_connection)    all busy → own thread   │
    │        │                                                             │
    │        ▼  (worker thread)                                            │
    │   Connection.read_request()   nothing read → close, no response     │
    │        │                      OSError/timeout → log, close          │
    │        ▼                                                             │
    │   RequestParser.parse()       never raises                          │
    │        │                                                             │
    │        ▼                                                             │
    │   LoggingMiddleware → CompressionMiddleware → Router.handle()       │
    │        │                      handler raises → bare 500             │
    │        ▼                                                             │
    │   HTTPResponse.to_bytes() → Connection.send_response()              │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.close()                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every failure is confined to its own connection. The accept loop and
the other workers carry on.

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .handlers.files import FileSystem
from .http import (
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    Router,
    internal_error,
)
from .middleware import (
    CompressionMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewarePipeline,
)
from .routes import build_router


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Upper bound for draining in-flight connections on shutdown
SHUTDOWN_TIMEOUT = 5.0


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server for the minihttp routes.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=4221, directory="/tmp"))
        server.run()        # blocks until SIGINT/SIGTERM or shutdown()

    In tests, run it on a background thread with port=0:

        server = HTTPServer(ServerConfig(port=0))
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5)
        host, port = server.address
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        router: Optional[Router] = None,
        filesystem: Optional[FileSystem] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.
            router: Custom routing table. Defaults to the built-in routes
                    rooted at config.directory.
            filesystem: Storage for the built-in /files routes.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser()
        self._router = router or build_router(self.config.directory, filesystem)

        self._middleware = MiddlewarePipeline()
        self._middleware.use(LoggingMiddleware(), CompressionMiddleware())

        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._middleware.wrap(
            self._router.handle
        )

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware inside the built-in logging and compression layers.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = self._middleware.wrap(self._router.handle)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), real port included once listening."""
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server accepts connections."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            configure_logging: Install the default logging setup. Pass
                               False when the embedding app owns logging.

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        if configure_logging:
            self._setup_logging()

        host, port = self._socket_server.bind()
        self._thread_pool.start()

        logger.info(
            f"Listening on {host}:{port}, serving files from {self.config.directory}"
        )
        logger.debug(f"Routes: {', '.join(r.name or '?' for r in self._router.routes())}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        1. Stop accepting new connections
        2. Let in-flight and queued connections finish (bounded)
        3. Stop the workers
        """
        logger.info("Shutting down server...")
        self._socket_server.shutdown()
        self._thread_pool.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a connection to the thread pool (runs on the accept thread).

        When every worker is busy the connection gets a thread of its
        own, so slow clients never hold up new ones.
        """
        try:
            self._thread_pool.submit(self._process_connection, args=(conn,), overflow=True)
        except RuntimeError as e:
            # Shutting down, or no thread could be started
            logger.warning(f"[{conn.id}] Not accepting work: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        One read → respond → close cycle (runs in a worker thread).

        Transport errors end this connection only.
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except OSError as e:
                # socket.timeout is an OSError
                logger.warning(f"[{conn.id}] Read failed from {conn.client_ip}: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Closed by client before sending a request")
                return

            conn.state = ConnectionState.PROCESSING
            conn.send_response(self.handle(raw_request, conn.address))

    def handle(self, raw_request: bytes, client_address: Tuple[str, int] = ("", 0)) -> bytes:
        """
        Turn raw request bytes into raw response bytes.

        This is the whole protocol engine without any socket: parse,
        route through the middleware, serialize. A handler that raises
        produces a bare 500.
        """
        request = self._parser.parse(raw_request, client_address)

        try:
            response = self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.target}: {e}")
            response = internal_error()

        return response.to_bytes()


def create_app(config: Optional[ServerConfig] = None, **kwargs) -> HTTPServer:
    """
    Create an HTTP server application.

    Args:
        config: Server configuration.
        **kwargs: Passed to HTTPServer (router, filesystem).

    Example:
        app = create_app(ServerConfig(directory="/srv/files"))
        app.run()
    """
    return HTTPServer(config, **kwargs)
