"""Install the latest Zig master build and build ZLS against it."""

__version__ = "0.1.0"
