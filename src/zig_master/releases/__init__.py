"""Release index lookup and artifact download."""
from zig_master.releases.platforms import resolve_platform
from zig_master.releases.index import fetch_release_index, resolve_artifact
from zig_master.releases.fetcher import download_file, fetch_artifact

__all__ = [
    "resolve_platform",
    "fetch_release_index",
    "resolve_artifact",
    "download_file",
    "fetch_artifact",
]
