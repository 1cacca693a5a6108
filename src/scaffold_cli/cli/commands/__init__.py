"""CLI command modules for scaffold."""

from .scaffold import configure_logging, register_scaffold_command

__all__ = ["configure_logging", "register_scaffold_command"]
