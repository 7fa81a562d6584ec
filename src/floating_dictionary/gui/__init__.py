"""PySide6 GUI module for Floating Dictionary.

This module provides the graphical user interface including:
- The floating result window
- The Qt bridge for pipeline worker callbacks
"""

from .app import run

__all__ = ["run"]
