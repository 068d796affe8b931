import json
import logging
import tarfile
import zipfile
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from zig_master.types import PlatformKey
from zig_master.workspaces.workspace import create_workspace

ZIG_VERSION = "0.14.0-dev.2+abcdef"
PAYLOAD_NAME = f"zig-x86_64-linux-{ZIG_VERSION}"

FAKE_ZIG = f"""#!/bin/sh
echo {ZIG_VERSION}
"""


class ReleaseServer:
    """Local HTTP server standing in for ziglang.org"""

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.server = None

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(request.path)
        if request.path not in self.routes:
            return web.Response(status=404, text="not found")
        status, body = self.routes[request.path]
        return web.Response(status=status, body=body)

    def serve(self, path: str, body, status: int = 200) -> str:
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode()
        self.routes[path] = (status, body)
        return self.url(path)

    def serve_file(self, path: str, file: Path) -> str:
        return self.serve(path, file.read_bytes())

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))


@pytest_asyncio.fixture
async def release_server():
    """Start a release server with no routes"""
    release = ReleaseServer()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", release.handle)
    release.server = TestServer(app)
    await release.server.start_server()
    try:
        yield release
    finally:
        await release.server.close()


@pytest.fixture
def ws():
    """Real scratch workspace for one test"""
    workspace = create_workspace("zig-master-test-")
    try:
        yield workspace
    finally:
        workspace.temp_dir.cleanup()


@pytest.fixture
def linux_x86():
    return PlatformKey(arch="x86_64", os="linux")


def write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(0o755)
    return path


def make_payload(root: Path, name: str = PAYLOAD_NAME, zig_script: str = FAKE_ZIG) -> Path:
    """Lay out a payload directory the way the Zig tarballs do"""
    payload = root / name
    write_executable(payload / "zig", zig_script)
    (payload / "lib").mkdir()
    (payload / "lib" / "std.zig").write_text("// std\n")
    (payload / "LICENSE").write_text("MIT\n")
    return payload


@pytest.fixture
def make_archive(tmp_path):
    """Build a release archive containing one payload directory"""

    def _make(
        filename: str = f"{PAYLOAD_NAME}.tar.xz",
        payload_name: str = PAYLOAD_NAME,
        zig_script: str = FAKE_ZIG,
    ) -> Path:
        staging = tmp_path / "staging" / filename
        staging.mkdir(parents=True)
        payload = make_payload(staging, payload_name, zig_script)

        archive = tmp_path / "archives" / filename
        archive.parent.mkdir(exist_ok=True)

        if filename.endswith(".zip"):
            with zipfile.ZipFile(archive, "w") as zf:
                for file in sorted(payload.rglob("*")):
                    zf.write(file, file.relative_to(staging))
        else:
            mode = "w:xz" if filename.endswith(".tar.xz") else "w:gz"
            with tarfile.open(archive, mode) as tf:
                tf.add(payload, arcname=payload_name)

        return archive

    return _make


@pytest.fixture
def master_index():
    """Release index shaped like ziglang.org/download/index.json"""

    def _index(tarball_url, platform: str = "x86_64-linux") -> dict:
        return {
            "master": {
                "version": ZIG_VERSION,
                "date": "2024-11-01",
                platform: {
                    "tarball": tarball_url,
                    "shasum": "0" * 64,
                    "size": "123",
                },
            },
            "0.13.0": {"date": "2024-06-07"},
        }

    return _index


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers configure_logging attached during a test"""
    yield
    app_logger = logging.getLogger("zig_master")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)
