"""
Interactive CLI tools for isogas project files.

This module provides command-line tools for:
- Resolving diagram coordinates
- Snap and pick queries at a world position
- Material takeoff and project validation
"""

from .helper_cli import cli

__all__ = ["cli"]
