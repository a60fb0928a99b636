"""
=============================================================================
HANDLERS MODULE
=============================================================================

Request handlers behind the routing table.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Type              │ Handlers                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Function Handler  │ root, user_agent, echo      (basic.py)          │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Class Handler     │ FileHandler over a FileSystem (files.py)        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .basic import root, user_agent, echo
from .files import FileSystem, LocalFileSystem, FileHandler, FILE_MODE

__all__ = [
    "root",
    "user_agent",
    "echo",
    "FileSystem",
    "LocalFileSystem",
    "FileHandler",
    "FILE_MODE",
]
