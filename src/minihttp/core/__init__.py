"""
=============================================================================
CORE NETWORKING
=============================================================================

    SocketServer   bind / listen / accept loop, signals
    Connection     one bounded read, one write, graceful close
    ThreadPool     worker threads fed by a bounded queue

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool, Worker, WorkerState

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
    "Worker",
    "WorkerState",
]
