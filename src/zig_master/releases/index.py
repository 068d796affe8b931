"""Release index retrieval and lookup."""

import json
from pathlib import PurePosixPath
from typing import Any, Dict
from urllib.parse import unquote, urlparse

import aiohttp

from zig_master.constants import MASTER_CHANNEL, TARBALL_FIELD
from zig_master.errors import ArtifactNotFound, DownloadError, MalformedIndex
from zig_master.types import ArtifactDescriptor, PlatformKey
from zig_master.logging import get_logger

logger = get_logger(__name__)


async def fetch_release_index(session: aiohttp.ClientSession, url: str) -> Dict[str, Any]:
    """Fetch and parse the release index document."""
    logger.info({"event": "fetching_index", "url": url})

    try:
        async with session.get(url) as response:
            if response.status < 200 or response.status >= 300:
                logger.error(
                    {
                        "event": "index_request_failed",
                        "url": url,
                        "status": response.status,
                        "reason": response.reason,
                    }
                )
                raise DownloadError(url, f"HTTP {response.status} {response.reason}", response.status)
            body = await response.read()
    except aiohttp.ClientError as e:
        raise DownloadError(url, str(e) or e.__class__.__name__) from e

    try:
        index = json.loads(body)
    except ValueError as e:
        raise MalformedIndex(url, f"invalid JSON ({e})") from e

    if not isinstance(index, dict):
        raise MalformedIndex(url, "top level is not an object")
    if MASTER_CHANNEL in index and not isinstance(index[MASTER_CHANNEL], dict):
        raise MalformedIndex(url, f"'{MASTER_CHANNEL}' entry is not an object")

    logger.debug({"event": "index_fetched", "url": url, "channels": len(index)})

    return index


def filename_from_url(url: str) -> str:
    """Final path segment of a URL."""
    return PurePosixPath(unquote(urlparse(url).path)).name


def resolve_artifact(index: Dict[str, Any], key: PlatformKey) -> ArtifactDescriptor:
    """Look up the master build for a platform key.

    Raises ArtifactNotFound when the platform entry or its tarball URL is
    missing, empty or the literal "null".
    """
    master = index.get(MASTER_CHANNEL) or {}
    entry = master.get(str(key))

    url = entry.get(TARBALL_FIELD) if isinstance(entry, dict) else None
    if not isinstance(url, str) or not url.strip() or url.strip() == "null":
        logger.error({"event": "artifact_not_found", "platform": str(key)})
        raise ArtifactNotFound(str(key))

    url = url.strip()
    filename = filename_from_url(url)
    if not filename:
        raise ArtifactNotFound(str(key))

    size = entry.get("size")
    try:
        size = int(size) if size is not None else None
    except (TypeError, ValueError):
        size = None

    descriptor = ArtifactDescriptor(
        platform=key,
        url=url,
        filename=filename,
        version=master.get("version"),
        shasum=entry.get("shasum"),
        size=size,
    )

    logger.info(
        {
            "event": "artifact_resolved",
            "platform": str(key),
            "url": url,
            "version": descriptor.version,
        }
    )

    return descriptor
