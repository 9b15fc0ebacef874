"""CLI command modules."""

from . import edit_cmd, files_cmd

__all__ = ["edit_cmd", "files_cmd"]
