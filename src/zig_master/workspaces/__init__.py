"""Scratch workspace and external command helpers."""
from zig_master.workspaces.workspace import (
    create_workspace,
    cleanup_workspace,
    workspace,
)
from zig_master.workspaces.commands import run_command, is_command_available
from zig_master.workspaces.git import clone_repository, normalize_github_url

__all__ = [
    "create_workspace",
    "cleanup_workspace",
    "workspace",
    "run_command",
    "is_command_available",
    "clone_repository",
    "normalize_github_url",
]
