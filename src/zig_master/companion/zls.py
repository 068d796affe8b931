"""Build ZLS from source with the freshly installed compiler.

Every failure here is converted into a CompanionSkipped result; nothing
raised in this module reaches the primary pipeline.
"""

from pathlib import Path
from typing import Optional

from zig_master.constants import (
    ZLS_BINARY,
    ZLS_BUILD_ARGS,
    ZLS_OUTPUT_DIR,
    ZLS_REPO,
    ZLS_REPO_HOME,
)
from zig_master.errors import InstallerError
from zig_master.installers.system import SystemInstaller
from zig_master.types import (
    CompanionInstalled,
    CompanionOutcome,
    CompanionSkipped,
    Workspace,
)
from zig_master.workspaces.commands import is_command_available, run_command
from zig_master.workspaces.git import clone_repository
from zig_master.logging import get_logger

logger = get_logger(__name__)

MANUAL_HINT = f"You may need to build ZLS manually from: {ZLS_REPO_HOME}"


class CompanionError(Exception):
    """A companion build step failed."""

    def __init__(self, reason: str, hint: Optional[str] = MANUAL_HINT):
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def find_built_binary(source_dir: Path) -> Path:
    """Locate the zls executable under the build output directory."""
    out_dir = source_dir / ZLS_OUTPUT_DIR
    if out_dir.is_dir():
        for candidate in sorted(out_dir.rglob(ZLS_BINARY)):
            if candidate.is_file():
                return candidate
    raise CompanionError("Could not find ZLS binary after build")


async def _build(source_dir: Path, zig_binary: Path) -> Path:
    try:
        returncode, _, stderr = await run_command([zig_binary, *ZLS_BUILD_ARGS], cwd=source_dir)
    except OSError as e:
        raise CompanionError(f"Could not run {zig_binary}: {e}") from e

    if returncode != 0:
        tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
        logger.error({"event": "zls_build_failed", "returncode": returncode, "stderr": tail})
        raise CompanionError(f"ZLS build failed with exit code {returncode}")

    return find_built_binary(source_dir)


async def _probe_version(binary: Path) -> Optional[str]:
    try:
        returncode, stdout, _ = await run_command([binary, "--version"])
    except OSError:
        return None
    if returncode != 0:
        return None
    return stdout.decode(errors="replace").strip() or None


async def build_companion(
    ws: Workspace,
    zig_binary: Path,
    installer: SystemInstaller,
    *,
    bin_dir: Path,
    repo_url: str = ZLS_REPO,
) -> CompanionOutcome:
    """Clone, build and install ZLS; report the outcome instead of raising."""
    try:
        if not is_command_available("git"):
            raise CompanionError("git is required to build ZLS", hint="Skipping ZLS installation")

        try:
            source_dir = await clone_repository(ws, repo_url, "zls")
        except (RuntimeError, ValueError, OSError) as e:
            raise CompanionError(f"Could not clone ZLS: {e}") from e

        built = await _build(source_dir, zig_binary)

        try:
            installed = await installer.copy_file(built, bin_dir / ZLS_BINARY)
        except InstallerError as e:
            raise CompanionError(f"Could not install ZLS: {e}") from e

    except CompanionError as e:
        logger.warning({"event": "companion_skipped", "reason": e.reason})
        return CompanionSkipped(reason=e.reason, hint=e.hint)

    version = await _probe_version(installed)
    logger.info({"event": "companion_installed", "binary": str(installed), "version": version})

    return CompanionInstalled(binary=installed, version=version)
