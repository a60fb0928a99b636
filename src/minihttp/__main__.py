"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m minihttp                          # serve ./ on port 4221
    python -m minihttp --directory /tmp/files   # files root
    minihttp -d /tmp/files -p 8080 -w 8         # installed console script

Flags left out fall back to MINIHTTP_* environment variables, then to
the ServerConfig defaults.

Exit status: 0 after a clean shutdown, 1 if the address cannot be bound,
2 for invalid arguments.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .server import HTTPServer


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal multi-threaded HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                        # Run with defaults
  python -m minihttp --directory /tmp/data  # Serve /files/* from /tmp/data
  python -m minihttp --port 8080 -w 8       # Custom port, 8 worker threads
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Root directory for /files/<name> (default: current directory)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection read/write deadline in seconds (default: 10)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum worker threads (default: 16)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Overlay explicitly given flags on the environment configuration."""
    config = ServerConfig.from_env()

    if args.directory is not None:
        config.directory = args.directory
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        logger.error(f"Server failed to start: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
