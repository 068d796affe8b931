"""Artifact download."""

from pathlib import Path
from typing import Optional

import aiohttp

from zig_master.constants import DOWNLOAD_CHUNK_SIZE, INDEX_URL
from zig_master.errors import DownloadError
from zig_master.releases.index import fetch_release_index, resolve_artifact
from zig_master.types import PlatformKey, Workspace
from zig_master.logging import get_logger

logger = get_logger(__name__)

# No client-imposed deadline; transport defaults only.
NO_TIMEOUT = aiohttp.ClientTimeout(total=None)


async def download_file(session: aiohttp.ClientSession, url: str, dest: Path) -> Path:
    """Stream a URL to dest, removing any partial file on failure."""
    logger.info({"event": "download_started", "url": url, "destination": str(dest)})

    downloaded = 0
    try:
        async with session.get(url) as response:
            if response.status < 200 or response.status >= 300:
                logger.error(
                    {
                        "event": "download_request_failed",
                        "url": url,
                        "status": response.status,
                        "reason": response.reason,
                    }
                )
                raise DownloadError(url, f"HTTP {response.status} {response.reason}", response.status)

            expected = int(response.headers.get("content-length", 0))

            with open(dest, "wb") as f:
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
                    downloaded += len(chunk)

    except aiohttp.ClientError as e:
        dest.unlink(missing_ok=True)
        raise DownloadError(url, str(e) or e.__class__.__name__) from e
    except DownloadError:
        dest.unlink(missing_ok=True)
        raise
    except OSError as e:
        logger.error({"event": "download_write_failed", "destination": str(dest), "error": str(e)})
        dest.unlink(missing_ok=True)
        raise DownloadError(url, f"cannot write {dest}: {e}") from e

    if downloaded == 0:
        dest.unlink(missing_ok=True)
        raise DownloadError(url, "empty response body")

    logger.info(
        {
            "event": "download_complete",
            "url": url,
            "size": downloaded,
            "expected_size": expected,
        }
    )

    return dest


async def fetch_artifact(
    key: PlatformKey,
    ws: Workspace,
    *,
    index_url: str = INDEX_URL,
    session: Optional[aiohttp.ClientSession] = None,
) -> Path:
    """Download the master build for key into the workspace.

    The lookup happens before anything is downloaded, so an unknown
    platform never writes to the workspace.
    """
    if session is None:
        async with aiohttp.ClientSession(timeout=NO_TIMEOUT) as own_session:
            return await fetch_artifact(key, ws, index_url=index_url, session=own_session)

    index = await fetch_release_index(session, index_url)
    descriptor = resolve_artifact(index, key)

    return await download_file(session, descriptor.url, ws.root / descriptor.filename)
