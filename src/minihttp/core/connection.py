"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle:

    read (bounded) → [parse → route → encode] → write → close

There is no keep-alive and no pipelining. The connection is always
closed after the response, or without one if the client sent nothing.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A request can arrive split over several recv() calls:

    recv() → "GET /echo/he"
    recv() → "llo HTTP/1.1\r\n\r\n"

So the read keeps going until it has the header terminator (and any
Content-Length body), but never past `buffer_size` bytes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        BOUNDED READ                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   while len(buffer) < buffer_size:                                  │
    │       chunk = recv(buffer_size - len(buffer))                       │
    │       no chunk           → client closed, stop                       │
    │       request complete   → stop                                      │
    │       timeout, bytes read → stop, answer what arrived               │
    │       timeout, nothing    → raise, close without a response         │
    │                                                                      │
    │   A request longer than buffer_size is cut at exactly buffer_size   │
    │   bytes. What follows is never read.                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The first recv() waits up to `timeout`. Once some bytes are in, each
further recv() waits at most `continuation_timeout`, so a request that
never completes (no blank line, or a body shorter than its
Content-Length) is still parsed and answered shortly after it stops
arriving.

=============================================================================
CONNECTION STATES
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                       ▲
              └── nothing received / error ───────────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"

# Cap on bytes discarded while closing
DRAIN_LIMIT = 64 * 1024

# Wait for the rest of a request once its first bytes have arrived
CONTINUATION_TIMEOUT = 1.0


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


def expected_length(data: bytes) -> Optional[int]:
    """
    Total request length announced by the data read so far.

    Returns:
        header block + terminator + Content-Length, or None while the
        header terminator has not arrived yet.
    """
    header_end = data.find(HEADER_TERMINATOR)
    if header_end == -1:
        return None

    body_start = header_end + len(HEADER_TERMINATOR)
    return body_start + _parse_content_length(data[:header_end])


def _parse_content_length(headers: bytes) -> int:
    """
    Find Content-Length in a raw header block.

    A plain scan rather than a full parse: it is needed before the
    request is parsed. Missing or invalid values count as 0.
    """
    for line in headers.decode("latin-1").split("\r\n")[1:]:
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            try:
                return max(int(value.strip()), 0)
            except ValueError:
                return 0
    return 0


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket (owned exclusively by this object).
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current connection state.
        buffer_size: Upper bound on bytes read for the request.
        timeout: Per-operation deadline in seconds (None = block).
        continuation_timeout: Wait for more bytes of a started request,
                              capped by `timeout`.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 10.0
    continuation_timeout: float = CONTINUATION_TIMEOUT

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one request, at most `buffer_size` bytes.

        Returns:
            The bytes received, or None if the client closed the
            connection without sending anything. An incomplete request
            is returned as-is once the client stops sending.

        Raises:
            socket.timeout: If nothing at all arrives before the deadline.
            OSError: On any other socket failure.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            while len(buffer) < self.buffer_size:
                try:
                    chunk = self._recv(self.buffer_size - len(buffer))
                except socket.timeout:
                    if not buffer:
                        raise
                    logger.debug(
                        f"[{self.id}] Request incomplete after {len(buffer)} bytes, answering as is"
                    )
                    break

                if not chunk:
                    break  # Client closed its side

                buffer += chunk

                total = expected_length(buffer)
                if total is not None and len(buffer) >= total:
                    break

                self.socket.settimeout(self._continuation_deadline())
        finally:
            self.socket.settimeout(self.timeout)

        if len(buffer) >= self.buffer_size:
            logger.debug(f"[{self.id}] Request read capped at {self.buffer_size} bytes")

        return buffer or None

    def _continuation_deadline(self) -> float:
        if self.timeout is None:
            return self.continuation_timeout
        return min(self.timeout, self.continuation_timeout)

    def _recv(self, size: int) -> bytes:
        """
        Receive up to `size` bytes.

        A reset from the client reads as end of stream.
        """
        try:
            return self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Returns:
            True if send succeeded, False if the connection failed. The
            failure is logged and confined to this connection.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response
        2. drain whatever the client still sends, so close() does not
           turn unread data into a RST that could destroy the response
        3. close() releases the descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            drained = 0
            while drained < DRAIN_LIMIT:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
            # closed here, whatever happened
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
