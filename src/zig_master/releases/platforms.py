"""Platform detection and mapping."""
import platform
from typing import Optional

from zig_master.errors import UnsupportedPlatform
from zig_master.types import PlatformKey

# Raw `uname -m` values to release-index architecture tags
ARCH_MAPPINGS = {
    "x86_64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "armv7l": "armv7a",
}

UNSUPPORTED_SYSTEMS = {"windows"}


def resolve_platform(
    machine: Optional[str] = None, system: Optional[str] = None
) -> PlatformKey:
    """Map the host's architecture and kernel name to a release-index key."""
    if machine is None:
        machine = platform.machine()
    if system is None:
        system = platform.system()

    arch = ARCH_MAPPINGS.get(machine)
    if arch is None:
        raise UnsupportedPlatform(machine or "<unknown>")

    os_name = system.lower()
    if not os_name or os_name in UNSUPPORTED_SYSTEMS:
        raise UnsupportedPlatform(system or "<unknown>", kind="operating system")

    return PlatformKey(arch=arch, os=os_name)

