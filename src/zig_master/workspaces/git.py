"""Functions for working with Git and Github"""

from pathlib import Path
from typing import Optional

from zig_master.types import Workspace
from zig_master.logging import get_logger
from zig_master.workspaces.commands import run_command


def normalize_github_url(url: str) -> str:
    """Convert GitHub URL to HTTPS format."""
    if not url:
        raise ValueError("URL cannot be empty")

    if "?" in url or "#" in url:
        raise ValueError("URLs with query parameters or fragments not supported")

    if url.startswith("git@github.com:"):
        return f"https://github.com/{url.split(':', 1)[1]}"

    if url.startswith("http://"):
        raise ValueError("HTTP URLs not supported, use HTTPS")

    if url.startswith("github.com"):
        return f"https://{url}"

    if not url.startswith(("https://", "file://", "/")):
        return f"https://github.com/{url}"

    return url


logger = get_logger(__name__)


async def clone_repository(
    ws: Workspace, url: str, dest_name: str, depth: Optional[int] = 1
) -> Path:
    """Shallow-clone a repository into the workspace and return its path."""
    url = normalize_github_url(url)
    target_dir = ws.root / dest_name

    cmd = ["git", "clone"]
    if depth:
        cmd += ["--depth", str(depth)]
    cmd += [url, str(target_dir)]

    logger.debug({"event": "cloning_repository", "command": cmd, "target_dir": str(target_dir)})

    returncode, _, stderr = await run_command(cmd, cwd=ws.root)
    if returncode != 0:
        logger.error(
            {
                "event": "clone_failed",
                "return_code": returncode,
                "stderr": stderr.decode(errors="replace"),
            }
        )
        raise RuntimeError(f"Failed to clone repository: {stderr.decode(errors='replace').strip()}")

    logger.info({"event": "repository_cloned", "url": url, "target_dir": str(target_dir)})

    return target_dir
