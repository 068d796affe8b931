"""Best-effort companion tool build."""
from zig_master.companion.zls import build_companion, CompanionError

__all__ = ["build_companion", "CompanionError"]
