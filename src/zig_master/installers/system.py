"""Privileged filesystem writes.

All writes outside the workspace go through a SystemInstaller so the rest
of the pipeline can run, and be tested, without elevated privileges.
"""

import os
import shutil
import stat
from pathlib import Path
from typing import Protocol

from zig_master.errors import InstallError, MissingPrerequisite, PermissionDenied
from zig_master.logging import get_logger
from zig_master.workspaces.commands import run_command, is_command_available

logger = get_logger(__name__)

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class SystemInstaller(Protocol):
    """Capability for writes into the install prefix and binary directory."""

    async def copy_tree(self, src: Path, dest_dir: Path) -> Path:
        """Copy directory src into dest_dir, overwriting; return the copy."""

    async def link(self, target: Path, link_path: Path) -> None:
        """Point link_path at target, replacing any existing entry."""

    async def copy_file(self, src: Path, dest: Path) -> Path:
        """Copy a file to dest and mark it executable."""


class DirectInstaller:
    """Writes in-process; used when the target directories are writable."""

    async def copy_tree(self, src: Path, dest_dir: Path) -> Path:
        dest = dest_dir / src.name
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
        except PermissionError as e:
            raise PermissionDenied(str(dest), str(e)) from e
        except OSError as e:
            raise InstallError(f"Failed to copy {src} to {dest}: {e}") from e

        logger.info({"event": "tree_copied", "source": str(src), "destination": str(dest)})
        return dest

    async def link(self, target: Path, link_path: Path) -> None:
        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
            if link_path.is_symlink() or link_path.exists():
                link_path.unlink()
            link_path.symlink_to(target)
        except PermissionError as e:
            raise PermissionDenied(str(link_path), str(e)) from e
        except OSError as e:
            raise InstallError(f"Failed to link {link_path} -> {target}: {e}") from e

        logger.info({"event": "symlink_created", "link": str(link_path), "target": str(target)})

    async def copy_file(self, src: Path, dest: Path) -> Path:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if dest.is_symlink():
                dest.unlink()
            shutil.copy2(src, dest)
            dest.chmod(dest.stat().st_mode | EXECUTABLE_BITS)
        except PermissionError as e:
            raise PermissionDenied(str(dest), str(e)) from e
        except OSError as e:
            raise InstallError(f"Failed to copy {src} to {dest}: {e}") from e

        logger.info({"event": "file_copied", "source": str(src), "destination": str(dest)})
        return dest


class SudoInstaller:
    """Writes through `sudo`, mirroring cp/ln/chmod."""

    async def _sudo(self, *argv: str) -> None:
        cmd = ["sudo", *argv]
        try:
            returncode, _, stderr = await run_command(cmd)
        except OSError as e:
            raise InstallError(f"Failed to run {' '.join(cmd)}: {e}") from e

        if returncode != 0:
            message = stderr.decode(errors="replace").strip()
            logger.error({"event": "sudo_failed", "cmd": cmd, "returncode": returncode, "stderr": message})
            if "permission denied" in message.lower() or "not in the sudoers" in message.lower():
                raise PermissionDenied(argv[-1], message)
            raise InstallError(f"Command failed ({returncode}): {' '.join(cmd)}\n{message}")

    async def copy_tree(self, src: Path, dest_dir: Path) -> Path:
        await self._sudo("mkdir", "-p", str(dest_dir))
        await self._sudo("cp", "-r", str(src), f"{dest_dir}/")
        dest = dest_dir / src.name
        logger.info({"event": "tree_copied", "source": str(src), "destination": str(dest)})
        return dest

    async def link(self, target: Path, link_path: Path) -> None:
        await self._sudo("mkdir", "-p", str(link_path.parent))
        await self._sudo("ln", "-sfn", str(target), str(link_path))
        logger.info({"event": "symlink_created", "link": str(link_path), "target": str(target)})

    async def copy_file(self, src: Path, dest: Path) -> Path:
        await self._sudo("mkdir", "-p", str(dest.parent))
        await self._sudo("cp", str(src), str(dest))
        await self._sudo("chmod", "+x", str(dest))
        logger.info({"event": "file_copied", "source": str(src), "destination": str(dest)})
        return dest


def _writable(path: Path) -> bool:
    """True if path, or its nearest existing ancestor, is writable."""
    for candidate in (path, *path.parents):
        if candidate.exists():
            return os.access(candidate, os.W_OK)
    return False


def select_installer(prefix: Path, bin_dir: Path, use_sudo: bool = True) -> SystemInstaller:
    """Pick how privileged writes are performed for these directories."""
    is_root = hasattr(os, "geteuid") and os.geteuid() == 0

    if is_root or not use_sudo or (_writable(prefix) and _writable(bin_dir)):
        logger.debug({"event": "installer_selected", "installer": "direct"})
        return DirectInstaller()

    if not is_command_available("sudo"):
        raise MissingPrerequisite(
            "sudo",
            hint=f"Run as root or make {prefix} and {bin_dir} writable.",
        )

    logger.debug({"event": "installer_selected", "installer": "sudo"})
    return SudoInstaller()
