"""Command-line entry point."""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import click

from zig_master import __version__
from zig_master.constants import (
    DEFAULT_PREFIX,
    ENV_BIN_DIR,
    ENV_INDEX_URL,
    ENV_PREFIX,
    ENV_ZLS_REPO,
    INDEX_URL,
    ZLS_REPO,
)
from zig_master.errors import InstallerError, log_error
from zig_master.pipeline import run_pipeline
from zig_master.releases.platforms import resolve_platform
from zig_master.types import CompanionInstalled, InstallConfig, InstallReport
from zig_master.workspaces.workspace import workspace
from zig_master.logging import configure_logging, get_logger

logger = get_logger("cli")

EXIT_INTERRUPTED = 130


def handle_shutdown(signum, frame):
    logger.info(f"Shutting down on signal {signum}")
    # SystemExit unwinds through the workspace context manager.
    sys.exit(128 + signum)


def setup_handlers() -> None:
    signal.signal(signal.SIGTERM, handle_shutdown)


def print_summary(report: InstallReport) -> None:
    click.echo("")
    if isinstance(report.companion, CompanionInstalled):
        click.echo("ZLS built and installed successfully!")
        click.echo(f"ZLS version: {report.companion.version or 'not available'}")
    else:
        click.secho(f"Warning: {report.companion.reason}", fg="yellow", err=True)
        if report.companion.hint:
            click.secho(report.companion.hint, fg="yellow", err=True)

    click.echo("")
    click.echo("=== Installation complete! ===")
    click.echo(f"Zig: {report.zig_version}")
    zls = report.companion.binary if isinstance(report.companion, CompanionInstalled) else "not installed"
    click.echo(f"ZLS: {zls}")
    click.echo("")
    click.echo("Note: You may need to restart your editor/IDE to use the new ZLS.")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--index-url", envvar=ENV_INDEX_URL, default=INDEX_URL, show_default=True,
              help="Release index to read the master build from.")
@click.option("--prefix", envvar=ENV_PREFIX, type=click.Path(path_type=Path),
              default=DEFAULT_PREFIX, show_default=True,
              help="Directory the payload directory is copied into.")
@click.option("--bin-dir", envvar=ENV_BIN_DIR, type=click.Path(path_type=Path), default=None,
              help="Directory for the zig/zls entries.  [default: PREFIX/bin]")
@click.option("--zls-repo", envvar=ENV_ZLS_REPO, default=ZLS_REPO, show_default=True,
              help="Repository ZLS is built from.")
@click.option("--skip-zls", is_flag=True, help="Install Zig only.")
@click.option("--no-sudo", is_flag=True, help="Never escalate with sudo.")
@click.option("-v", "--verbose", is_flag=True, help="Emit debug logs on stderr.")
@click.version_option(__version__, prog_name="zig-master")
def main(
    index_url: str,
    prefix: Path,
    bin_dir: Optional[Path],
    zls_repo: str,
    skip_zls: bool,
    no_sudo: bool,
    verbose: bool,
) -> None:
    """Download and install the latest Zig master build and ZLS."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    setup_handlers()

    config = InstallConfig(
        index_url=index_url,
        prefix=prefix,
        bin_dir=bin_dir or prefix / "bin",
        zls_repo=zls_repo,
        build_companion=not skip_zls,
        use_sudo=not no_sudo,
    )

    click.echo("=== Installing Zig and ZLS master builds ===")

    try:
        key = resolve_platform()
        with workspace() as ws:
            report = asyncio.run(run_pipeline(config, ws, key=key, progress=click.echo))
    except InstallerError as e:
        log_error(e, logger=logger)
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        click.secho("Interrupted", fg="red", err=True)
        sys.exit(EXIT_INTERRUPTED)

    print_summary(report)
