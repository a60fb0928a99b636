"""
=============================================================================
FILE HANDLERS
=============================================================================

GET and POST for /files/<name>, backed by a FileSystem capability.

=============================================================================
THE FILESYSTEM CAPABILITY
=============================================================================

Handlers never touch os/open directly. They go through a small interface
so tests (and embedders) can swap the storage:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ FileSystem                                                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │  exists(name) -> bool      regular file present?                    │
    │  read(name)   -> bytes     raises OSError on failure                │
    │  write(name, data)         raises OSError on failure                │
    └─────────────────────────────────────────────────────────────────────┘

LocalFileSystem resolves names as os.path.join(root, name). Because a
name is a single path segment it never contains "/". Anything that is
not a regular file (a directory, "..", a missing name) does not exist
as far as GET is concerned.

=============================================================================
RESPONSES
=============================================================================

    GET  /files/<name>   present      → 200 application/octet-stream
                         read fails   → 500
    POST /files/<name>   written      → 201, Location: /files/<name>
                         write fails  → 500

A GET for a missing file never reaches this module: the route
predicate checks existence first and the router answers 404.

=============================================================================
"""

import os
import logging
from abc import ABC, abstractmethod

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ResponseBuilder,
    created,
    internal_error,
)


logger = logging.getLogger(__name__)

# Owner read/write, group and other read
FILE_MODE = 0o644


class FileSystem(ABC):
    """Storage capability used by the /files routes."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """True if `name` is a readable regular file."""

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Return the file contents. Raises OSError on failure."""

    @abstractmethod
    def write(self, name: str, data: bytes) -> None:
        """Create or overwrite the file. Raises OSError on failure."""


class LocalFileSystem(FileSystem):
    """
    FileSystem rooted at a directory on local disk.

    Args:
        root: Directory files are read from and written to.
              Fixed at construction and never changed.
    """

    def __init__(self, root: str = "."):
        self._root = root

    @property
    def root(self) -> str:
        return self._root

    def path_for(self, name: str) -> str:
        return os.path.join(self._root, name)

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path_for(name))

    def read(self, name: str) -> bytes:
        with open(self.path_for(name), "rb") as f:
            return f.read()

    def write(self, name: str, data: bytes) -> None:
        # os.open so a newly created file gets FILE_MODE (minus umask)
        fd = os.open(
            self.path_for(name),
            os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
            FILE_MODE,
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)


class FileHandler:
    """
    Handlers for GET/POST /files/<name>.

    Usage:
        files = FileHandler(LocalFileSystem("/tmp/data"))

        router.get(all_of(files_shape, files.exists))(files.get)
        router.post(files_shape)(files.post)
    """

    def __init__(self, filesystem: FileSystem):
        self.filesystem = filesystem

    @staticmethod
    def file_name(request: HTTPRequest) -> str:
        """The <name> part of /files/<name>."""
        return request.segment(2)

    def exists(self, request: HTTPRequest) -> bool:
        """Route predicate: does the requested file exist?"""
        return self.filesystem.exists(self.file_name(request))

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """Serve the file contents as application/octet-stream."""
        name = self.file_name(request)
        try:
            content = self.filesystem.read(name)
        except OSError as e:
            logger.warning(f"Failed to read file {name!r}: {e}")
            return internal_error()

        return ResponseBuilder().octet_stream(content).build()

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """Write the request body to the file, creating or truncating it."""
        name = self.file_name(request)
        try:
            self.filesystem.write(name, request.body)
        except OSError as e:
            logger.warning(f"Failed to write file {name!r}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body)} bytes to {name!r}")
        return created(f"/files/{name}")
