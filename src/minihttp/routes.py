"""
=============================================================================
ROUTING TABLE
=============================================================================

Builds the server's route table in precedence order (first match wins):

    ┌────────┬──────────────────────────────────────────┬────────────────┐
    │ Method │ Condition                                │ Handler        │
    ├────────┼──────────────────────────────────────────┼────────────────┤
    │ GET    │ target == "/"                            │ root           │
    │ GET    │ segment[1] == "user-agent"               │ user_agent     │
    │ GET    │ len > 2 and segment[1] == "echo"         │ echo           │
    │ GET    │ len > 2 and segment[1] == "files"        │ FileHandler.get│
    │        │   and the file exists                    │                │
    │ POST   │ len > 2 and segment[1] == "files"        │ FileHandler.   │
    │        │                                          │   post         │
    ├────────┼──────────────────────────────────────────┼────────────────┤
    │ any    │ (none of the above)                      │ 404            │
    └────────┴──────────────────────────────────────────┴────────────────┘

=============================================================================
"""

from typing import Optional

from .http.router import Router, target_is, segment_is, all_of
from .handlers import basic
from .handlers.files import FileHandler, FileSystem, LocalFileSystem


ECHO_PATH = segment_is(1, "echo", min_len=3)
FILES_PATH = segment_is(1, "files", min_len=3)
USER_AGENT_PATH = segment_is(1, "user-agent")


def build_router(
    directory: str = ".",
    filesystem: Optional[FileSystem] = None,
) -> Router:
    """
    Create the Router serving the built-in routes.

    Args:
        directory: Root for /files/<name> when no filesystem is given.
        filesystem: Storage for /files routes. Defaults to a
                    LocalFileSystem rooted at `directory`.

    Returns:
        Router with every route registered in precedence order.
    """
    files = FileHandler(filesystem or LocalFileSystem(directory))
    router = Router()

    router.add_route("GET", target_is("/"), basic.root, name="root")
    router.add_route("GET", USER_AGENT_PATH, basic.user_agent, name="user_agent")
    router.add_route("GET", ECHO_PATH, basic.echo, name="echo")
    router.add_route("GET", all_of(FILES_PATH, files.exists), files.get, name="read_file")
    router.add_route("POST", FILES_PATH, files.post, name="write_file")

    return router
