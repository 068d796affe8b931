"""Release index, repository and install location defaults."""

from pathlib import Path

# Zig release index
INDEX_URL = "https://ziglang.org/download/index.json"
MASTER_CHANNEL = "master"
TARBALL_FIELD = "tarball"
PAYLOAD_PREFIX = "zig"
ZIG_BINARY = "zig"

# ZLS companion build
ZLS_REPO = "https://github.com/zigtools/zls.git"
ZLS_REPO_HOME = "https://github.com/zigtools/zls"
ZLS_BINARY = "zls"
ZLS_BUILD_ARGS = ["build", "-Doptimize=ReleaseSafe"]
ZLS_OUTPUT_DIR = Path("zig-out") / "bin"

# Install locations
DEFAULT_PREFIX = Path("/usr/local")

# Environment overrides read by the CLI
ENV_INDEX_URL = "ZIG_MASTER_INDEX_URL"
ENV_PREFIX = "ZIG_MASTER_PREFIX"
ENV_BIN_DIR = "ZIG_MASTER_BIN_DIR"
ENV_ZLS_REPO = "ZIG_MASTER_ZLS_REPO"

WORKSPACE_PREFIX = "zig-master-"
DOWNLOAD_CHUNK_SIZE = 8192
