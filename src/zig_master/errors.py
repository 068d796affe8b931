"""Installer error taxonomy.

Every fatal condition of the install pipeline is an ``InstallerError``
subclass carrying the process exit code the CLI should terminate with.
"""

import logging
from typing import Any, Dict, Optional

from zig_master.logging import log_with_data

EXIT_UNSUPPORTED_PLATFORM = 10
EXIT_MISSING_PREREQUISITE = 11
EXIT_DOWNLOAD_ERROR = 12
EXIT_MALFORMED_INDEX = 13
EXIT_ARTIFACT_NOT_FOUND = 14
EXIT_PAYLOAD_NOT_FOUND = 15
EXIT_PERMISSION_DENIED = 16
EXIT_INSTALL_ERROR = 17


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("zig_master.errors")

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, InstallerError):
        error_info["exit_code"] = error.exit_code
        error_info["details"] = error.details

    log_with_data(logger, logging.ERROR, "Installer error occurred", error_info)


class InstallerError(Exception):
    """Base error class for the installer."""

    exit_code = EXIT_INSTALL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class UnsupportedPlatform(InstallerError):
    """Host architecture or OS has no master build."""

    exit_code = EXIT_UNSUPPORTED_PLATFORM

    def __init__(self, value: str, kind: str = "architecture"):
        super().__init__(
            f"Unsupported {kind}: {value}",
            details={"kind": kind, "value": value},
        )


class MissingPrerequisite(InstallerError):
    """A required helper utility is unavailable."""

    exit_code = EXIT_MISSING_PREREQUISITE

    def __init__(self, name: str, hint: Optional[str] = None):
        message = f"{name} is required but not available"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message, details={"prerequisite": name})


class DownloadError(InstallerError):
    """Network failure or non-2xx response."""

    exit_code = EXIT_DOWNLOAD_ERROR

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(
            f"Failed to download {url}: {reason}",
            details={"url": url, "reason": reason, "status": status},
        )


class MalformedIndex(InstallerError):
    """Release index could not be parsed into the expected shape."""

    exit_code = EXIT_MALFORMED_INDEX

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Malformed release index from {url}: {reason}",
            details={"url": url, "reason": reason},
        )


class ArtifactNotFound(InstallerError):
    """No master build is published for the platform key."""

    exit_code = EXIT_ARTIFACT_NOT_FOUND

    def __init__(self, platform_key: str):
        super().__init__(
            f"Could not find Zig master build for {platform_key}",
            details={"platform": platform_key},
        )


class PayloadNotFound(InstallerError):
    """Extracted archive has no payload directory for the platform."""

    exit_code = EXIT_PAYLOAD_NOT_FOUND

    def __init__(self, pattern: str, root: str):
        super().__init__(
            f"Could not find extracted directory matching {pattern}",
            details={"pattern": pattern, "root": root},
        )


class PermissionDenied(InstallerError):
    """Privileged write was refused."""

    exit_code = EXIT_PERMISSION_DENIED

    def __init__(self, path: str, reason: str = "permission denied"):
        super().__init__(
            f"Cannot write {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InstallError(InstallerError):
    """Extraction, placement or verification of the install failed."""

    exit_code = EXIT_INSTALL_ERROR
