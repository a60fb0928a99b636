"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the minihttp server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --directory /tmp/files                  │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=4221 python -m minihttp                      │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The only value the request handlers care about is `directory`, the root
under which /files/<name> is read and written. Everything else tunes the
transport: where to listen, how much to read, how long to wait.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    FILES
    - directory

    THREADING SETTINGS
    - min_workers, max_workers, queue_size

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind to. All interfaces by default."""

    port: int = 4221
    """TCP port to listen on."""

    backlog: int = 128
    """Maximum number of connections queued by the OS before accept()."""

    buffer_size: int = 1024
    """
    Upper bound on the bytes read for one request.
    Anything past this many bytes is never read: large requests are
    truncated at exactly this boundary.
    """

    timeout: Optional[float] = 10.0
    """
    Per-connection deadline in seconds for reading and writing.
    None = blocking forever (a stalled client then pins a worker).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """Root directory for GET/POST /files/<name>."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads created at startup."""

    max_workers: int = 16
    """Ceiling the pool may scale up to under load."""

    queue_size: int = 128
    """Accepted connections allowed to wait for a free worker."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_HOST       Server host (default: 0.0.0.0)
        MINIHTTP_PORT       Server port (default: 4221)
        MINIHTTP_DIRECTORY  Files root (default: .)
        MINIHTTP_WORKERS    Max worker threads (default: 16)
        MINIHTTP_TIMEOUT    Per-connection deadline in seconds (default: 10)
        MINIHTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        max_workers = int(os.getenv("MINIHTTP_WORKERS", "16"))
        return cls(
            host=os.getenv("MINIHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("MINIHTTP_PORT", "4221")),
            directory=os.getenv("MINIHTTP_DIRECTORY", "."),
            min_workers=min(4, max_workers),
            max_workers=max_workers,
            timeout=float(os.getenv("MINIHTTP_TIMEOUT", "10")),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of on the first request.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
