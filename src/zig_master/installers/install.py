"""Place an extracted master build on the system."""

from pathlib import Path

from zig_master.constants import PAYLOAD_PREFIX, ZIG_BINARY
from zig_master.installers.archive import archive_stem, extract_archive, find_payload_dir
from zig_master.installers.system import SystemInstaller
from zig_master.types import InstalledZig, PlatformKey, Workspace
from zig_master.logging import get_logger

logger = get_logger(__name__)


async def install(
    archive: Path,
    key: PlatformKey,
    ws: Workspace,
    installer: SystemInstaller,
    *,
    prefix: Path,
    bin_dir: Path,
) -> InstalledZig:
    """Extract archive, copy the payload under prefix, and link bin_dir/zig.

    Each archive gets its own extraction directory, so only its payload
    is considered.

    Not transactional: a failed link after a successful copy leaves the
    new payload in place.
    """
    extract_root = extract_archive(archive, ws.root / "extract" / archive_stem(archive))
    payload = find_payload_dir(extract_root, key, PAYLOAD_PREFIX)

    installed_dir = await installer.copy_tree(payload, prefix)
    binary = prefix / payload.name / ZIG_BINARY
    link = bin_dir / ZIG_BINARY
    await installer.link(binary, link)

    logger.info(
        {
            "event": "zig_installed",
            "payload": payload.name,
            "installed_dir": str(installed_dir),
            "link": str(link),
        }
    )

    return InstalledZig(payload_dir=installed_dir, binary=binary, link=link)
