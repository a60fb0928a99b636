"""
=============================================================================
LOW-LEVEL SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, and hand every accepted
connection to a callback. It knows nothing about HTTP.

=============================================================================
ACCEPT LOOP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   bind() + listen()          failure → logged, OSError raised       │
    │        │                                                             │
    │        ▼                                                             │
    │   while running:                                                     │
    │       accept()  (1 second timeout so shutdown is noticed)           │
    │       ├── timeout       → loop again                                 │
    │       ├── OSError       → log, keep accepting                        │
    │       └── connection    → Connection(...) → handler(conn)           │
    │                                                                      │
    │   finally: restore signals, close the listening socket               │
    └─────────────────────────────────────────────────────────────────────┘

The handler must not block: HTTPServer only queues the connection on the
thread pool, so a slow client never delays the next accept().

=============================================================================
SIGNALS
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, kill) trigger a graceful
shutdown. Python only allows installing handlers from the main thread,
so when the server runs in a background thread (tests, embedding) the
handlers are skipped and shutdown() is the way to stop it.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening, cleared again on shutdown
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Reports the real port once bound, which matters when the
        configured port is 0 (let the OS choose).
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create and configure the server socket.

        SO_REUSEADDR lets a restarted server bind while the old socket
        sits in TIME_WAIT. TCP_NODELAY sends small responses at once.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up periodically to check the running flag
        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def bind(self) -> Tuple[str, int]:
        """
        Bind and listen without accepting yet.

        Returns:
            The bound address.

        Raises:
            OSError: If the address cannot be bound (in use, permission).
        """
        if self._socket is not None:
            return self.address

        sock = self._create_socket()
        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        self._socket = sock
        return self.address

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown() is called. BLOCKS.

        Binds first if bind() was not called already.

        Args:
            connection_handler: Called with every accepted Connection.
        """
        self.bind()

        self._running = True
        self._setup_signals()
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Poll the running flag
            except OSError as e:
                if not self._running:
                    break
                # Per-accept failures (EMFILE, ECONNABORTED) must not stop
                # the server
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting. Idempotent and callable from any thread.

        The accept loop notices within ACCEPT_POLL_INTERVAL seconds.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()
        self._ready_event.clear()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the server is accepting. True if it is."""
        return self._ready_event.wait(timeout)
