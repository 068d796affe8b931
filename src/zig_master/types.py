"""Core type definitions"""

from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Optional, Union


@dataclass(frozen=True)
class PlatformKey:
    """Architecture/OS pair identifying a build variant"""
    arch: str
    os: str

    def __str__(self) -> str:
        return f"{self.arch}-{self.os}"

    def payload_pattern(self, prefix: str = "zig") -> str:
        return f"{prefix}-{self.arch}-{self.os}-*"


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Download metadata for one platform of the master channel"""
    platform: PlatformKey
    url: str
    filename: str
    version: Optional[str] = None
    shasum: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class Workspace:
    """Scratch directory owned by a single run"""
    root: Path
    temp_dir: TemporaryDirectory


@dataclass(frozen=True)
class InstallConfig:
    """Settings for one install run"""
    index_url: str
    prefix: Path
    bin_dir: Path
    zls_repo: str
    build_companion: bool = True
    use_sudo: bool = True


@dataclass(frozen=True)
class InstalledZig:
    """Result of placing the payload under the prefix"""
    payload_dir: Path
    binary: Path
    link: Path


@dataclass(frozen=True)
class CompanionInstalled:
    """Companion tool was built and copied"""
    binary: Path
    version: Optional[str] = None


@dataclass(frozen=True)
class CompanionSkipped:
    """Companion tool was not installed; the primary install is unaffected"""
    reason: str
    hint: Optional[str] = None


CompanionOutcome = Union[CompanionInstalled, CompanionSkipped]


@dataclass(frozen=True)
class InstallReport:
    """Everything a successful run produced"""
    platform: PlatformKey
    zig: InstalledZig
    zig_version: str
    companion: CompanionOutcome
