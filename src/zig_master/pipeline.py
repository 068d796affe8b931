"""Resolve, fetch, install, then build the companion tool."""

from pathlib import Path
from typing import Callable, Optional

import aiohttp

from zig_master.companion.zls import build_companion
from zig_master.errors import InstallError
from zig_master.installers.install import install
from zig_master.installers.system import select_installer
from zig_master.releases.fetcher import fetch_artifact
from zig_master.releases.platforms import resolve_platform
from zig_master.types import CompanionSkipped, InstallConfig, InstallReport, PlatformKey, Workspace
from zig_master.workspaces.commands import run_command
from zig_master.logging import get_logger

logger = get_logger(__name__)

Progress = Callable[[str], None]


def _silent(_: str) -> None:
    pass


async def probe_zig_version(zig: Path) -> str:
    """Run `zig version`; an install that cannot report it is broken."""
    try:
        returncode, stdout, stderr = await run_command([zig, "version"])
    except OSError as e:
        raise InstallError(f"Installed zig could not be executed: {e}", details={"binary": str(zig)}) from e

    if returncode != 0:
        raise InstallError(
            f"`{zig} version` exited with {returncode}: {stderr.decode(errors='replace').strip()}",
            details={"binary": str(zig), "returncode": returncode},
        )

    return stdout.decode(errors="replace").strip()


async def run_pipeline(
    config: InstallConfig,
    ws: Workspace,
    *,
    key: Optional[PlatformKey] = None,
    machine: Optional[str] = None,
    system: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
    progress: Progress = _silent,
) -> InstallReport:
    """Run one install. Any InstallerError raised here is fatal.

    key is resolved from machine/system when the caller has not done so.
    """
    if key is None:
        key = resolve_platform(machine, system)
    progress(f"Detected: {key.os}-{key.arch}")

    installer = select_installer(config.prefix, config.bin_dir, config.use_sudo)

    progress("Fetching latest build information...")
    archive = await fetch_artifact(key, ws, index_url=config.index_url, session=session)
    progress(f"Downloaded {archive.name}")

    progress(f"Installing Zig to {config.prefix}...")
    zig = await install(archive, key, ws, installer, prefix=config.prefix, bin_dir=config.bin_dir)

    zig_version = await probe_zig_version(zig.link)
    progress(f"Zig {zig_version} installed successfully!")

    if config.build_companion:
        progress("Building ZLS from source...")
        companion = await build_companion(
            ws, zig.link, installer, bin_dir=config.bin_dir, repo_url=config.zls_repo
        )
    else:
        companion = CompanionSkipped(reason="skipped by request")

    report = InstallReport(platform=key, zig=zig, zig_version=zig_version, companion=companion)

    logger.info(
        {
            "event": "install_complete",
            "platform": str(key),
            "zig_version": zig_version,
            "companion": type(companion).__name__,
        }
    )

    return report
