import json
import logging
import re
from io import StringIO

import pytest

from zig_master.errors import (
    ArtifactNotFound,
    DownloadError,
    InstallError,
    InstallerError,
    MalformedIndex,
    MissingPrerequisite,
    PayloadNotFound,
    PermissionDenied,
    UnsupportedPlatform,
    log_error,
)
from zig_master.logging import (
    JsonFormatter,
    configure_logging,
    get_logger,
    log_with_data,
)

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def parse(output: str) -> dict:
    return json.loads(ANSI_ESCAPE.sub("", output.strip()))


def capture(logger: logging.Logger) -> StringIO:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return stream


def test_format_json_log():
    """Test JSON log formatting"""
    formatter = JsonFormatter()
    record = logging.LogRecord("test", logging.INFO, "test.py", 10, "Test message", (), None)

    data = parse(formatter.format(record))

    assert data["level"] == "INFO"
    assert data["msg"] == "Test message"
    assert data["logger"] == "test"


@pytest.mark.parametrize(
    "level,expected_color",
    [
        (logging.DEBUG, "\033[34m"),
        (logging.INFO, "\033[32m"),
        (logging.WARNING, "\033[33m"),
        (logging.ERROR, "\033[31m\033[1m"),
        (logging.CRITICAL, "\033[35m\033[1m"),
    ],
)
def test_format_json_log_colors(level, expected_color):
    """Test log level color coding"""
    record = logging.LogRecord("test", level, "test.py", 10, "Test message", (), None)

    output = JsonFormatter().format(record)

    assert output.startswith(expected_color)
    assert output.endswith("\033[0m")


def test_log_with_data():
    """Test structured logging produces valid JSON"""
    logger = logging.getLogger("zig_master.tests.data")
    stream = capture(logger)

    test_data = {"key": "value", "nested": {"foo": "bar"}}
    log_with_data(logger, logging.INFO, "Test message", test_data)

    data = parse(stream.getvalue())
    assert "ts" in data
    assert data["msg"] == "Test message"
    assert data["data"] == test_data


def test_get_logger():
    assert get_logger("releases").name == "zig_master.releases"
    assert get_logger("zig_master.releases.index").name == "zig_master.releases.index"


def test_configure_logging():
    """Test one stderr handler, no propagation, idempotent"""
    configure_logging(logging.DEBUG)
    configure_logging(logging.INFO)
    logger = logging.getLogger("zig_master")

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)
    assert not logger.propagate


@pytest.mark.parametrize(
    "error,exit_code",
    [
        (UnsupportedPlatform("mips"), 10),
        (MissingPrerequisite("sudo"), 11),
        (DownloadError("https://example/index.json", "HTTP 500", 500), 12),
        (MalformedIndex("https://example/index.json", "invalid JSON"), 13),
        (ArtifactNotFound("x86_64-linux"), 14),
        (PayloadNotFound("zig-x86_64-linux-*", "/tmp/x"), 15),
        (PermissionDenied("/usr/local/bin/zig"), 16),
        (InstallError("copy failed"), 17),
    ],
)
def test_exit_codes(error, exit_code):
    assert isinstance(error, InstallerError)
    assert error.exit_code == exit_code


def test_missing_prerequisite_hint():
    error = MissingPrerequisite("sudo", hint="Run as root.")
    assert str(error) == "sudo is required but not available. Run as root."


def test_log_error():
    """Test errors are logged with their exit code and details"""
    logger = logging.getLogger("zig_master.tests.errors")
    stream = capture(logger)

    log_error(ArtifactNotFound("x86_64-linux"), context={"stage": "fetch"}, logger=logger)

    data = parse(stream.getvalue())
    assert data["level"] == "ERROR"
    assert data["data"]["error_type"] == "ArtifactNotFound"
    assert data["data"]["exit_code"] == 14
    assert data["data"]["details"] == {"platform": "x86_64-linux"}
    assert data["data"]["context"] == {"stage": "fetch"}
