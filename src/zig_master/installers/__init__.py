"""Archive extraction and system placement."""
from zig_master.installers.archive import extract_archive, find_payload_dir
from zig_master.installers.system import (
    SystemInstaller,
    DirectInstaller,
    SudoInstaller,
    select_installer,
)
from zig_master.installers.install import install

__all__ = [
    "extract_archive",
    "find_payload_dir",
    "SystemInstaller",
    "DirectInstaller",
    "SudoInstaller",
    "select_installer",
    "install",
]
