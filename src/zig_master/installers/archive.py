"""Archive extraction and payload lookup."""

import re
import tarfile
import zipfile
from pathlib import Path

from zig_master.constants import PAYLOAD_PREFIX
from zig_master.errors import InstallError, MissingPrerequisite, PayloadNotFound
from zig_master.types import PlatformKey
from zig_master.logging import get_logger

logger = get_logger(__name__)

ARCHIVE_HANDLERS = {
    ".tar.xz": tarfile.open,
    ".tar.gz": tarfile.open,
    ".tgz": tarfile.open,
    ".tar": tarfile.open,
    ".zip": zipfile.ZipFile,
}


def archive_format(archive_path: Path) -> str:
    name = archive_path.name.lower()
    for suffix in sorted(ARCHIVE_HANDLERS, key=len, reverse=True):
        if name.endswith(suffix):
            return suffix
    return archive_path.suffix


def archive_stem(archive_path: Path) -> str:
    """Archive file name without its format suffix."""
    name = archive_path.name
    format = archive_format(archive_path)
    if format and name.lower().endswith(format):
        return name[: -len(format)] or name
    return name


def extract_archive(archive_path: Path, dest_dir: Path) -> Path:
    """Extract the whole archive into dest_dir."""
    format = archive_format(archive_path)
    handler = ARCHIVE_HANDLERS.get(format)

    logger.debug({"event": "extract_archive", "archive": str(archive_path), "format": format})

    if not handler:
        raise InstallError(f"Unsupported archive format: {format or archive_path.name}")

    dest_dir.mkdir(parents=True, exist_ok=True)

    try:
        with handler(archive_path) as archive:
            if isinstance(archive, tarfile.TarFile):
                archive.extractall(dest_dir, filter="data")
            else:
                archive.extractall(dest_dir)
    except tarfile.CompressionError as e:
        raise MissingPrerequisite(
            f"Decompressor for {format}",
            hint="Use a Python build with lzma/gzip support.",
        ) from e
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
        logger.error(
            {"event": "extract_failed", "archive": str(archive_path), "error": str(e)}
        )
        raise InstallError(f"Failed to extract {archive_path.name}: {e}") from e

    logger.info(
        {"event": "archive_extracted", "archive": str(archive_path), "extracted_to": str(dest_dir)}
    )

    return dest_dir


def natural_key(name: str) -> list:
    """Sort key comparing digit runs numerically ("0.10" > "0.9")."""
    return [(0, int(part)) if part.isdigit() else (1, part) for part in re.split(r"(\d+)", name) if part]


def find_payload_dir(root: Path, key: PlatformKey, prefix: str = PAYLOAD_PREFIX) -> Path:
    """Find the single top-level payload directory for key.

    Only immediate children of root are considered. When several match,
    the greatest name in natural order wins.
    """
    pattern = key.payload_pattern(prefix)
    matches = sorted(
        (p for p in root.glob(pattern) if p.is_dir()),
        key=lambda p: natural_key(p.name),
    )

    if not matches:
        logger.error({"event": "payload_not_found", "root": str(root), "pattern": pattern})
        raise PayloadNotFound(pattern, str(root))

    chosen = matches[-1]
    if len(matches) > 1:
        logger.warning(
            {
                "event": "multiple_payloads",
                "candidates": [p.name for p in matches],
                "chosen": chosen.name,
            }
        )

    return chosen
