"""Scratch workspace lifecycle."""

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from zig_master.constants import WORKSPACE_PREFIX
from zig_master.types import Workspace
from zig_master.logging import get_logger

logger = get_logger(__name__)


def create_workspace(prefix: str = WORKSPACE_PREFIX) -> Workspace:
    """Create a new scratch directory for one run."""

    temp_dir = tempfile.TemporaryDirectory(prefix=prefix)
    root = Path(temp_dir.name)

    logger.debug({"event": "workspace_created", "root": str(root)})

    return Workspace(root=root, temp_dir=temp_dir)


def cleanup_workspace(ws: Workspace) -> None:
    """Remove the workspace and everything in it."""

    logger.debug({"event": "cleaning_workspace", "root": str(ws.root)})
    ws.temp_dir.cleanup()


@contextmanager
def workspace(prefix: str = WORKSPACE_PREFIX) -> Iterator[Workspace]:
    """Yield a workspace that is removed however the block exits.

    Covers normal return, exceptions, KeyboardInterrupt and the SystemExit
    raised by the CLI's SIGTERM handler.
    """
    ws = create_workspace(prefix)
    try:
        yield ws
    finally:
        cleanup_workspace(ws)
