"""External command execution."""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Optional, Sequence, Union

from zig_master.logging import get_logger

logger = get_logger(__name__)


async def run_command(
    argv: Sequence[Union[str, Path]],
    cwd: Optional[Path] = None,
    env_vars: Optional[dict[str, str]] = None,
) -> tuple[int, bytes, bytes]:
    """Run a command and return (returncode, stdout, stderr).

    Raises FileNotFoundError/PermissionError when the program cannot be
    executed at all.
    """
    args = [str(a) for a in argv]
    cmd_env = {**os.environ, **(env_vars or {})}

    logger.debug({"event": "cmd_exec", "cmd": args, "cwd": str(cwd) if cwd else None})

    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=cmd_env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    stdout, stderr = await process.communicate()

    if stdout:
        logger.debug({"event": "cmd_stdout", "cmd": args, "output": stdout.decode(errors="replace")})
    if stderr:
        logger.debug({"event": "cmd_stderr", "cmd": args, "output": stderr.decode(errors="replace")})

    logger.debug({"event": "cmd_complete", "cmd": args, "returncode": process.returncode})

    return process.returncode, stdout, stderr


def is_command_available(cmd: str) -> bool:
    """Checks to see if a command is on PATH"""

    return shutil.which(cmd) is not None
