"""Rich Console wrapper for terminals without UTF-8 support.

All lint output (tables, summaries, errors) goes through SafeConsole so that
Unicode icons degrade to ASCII instead of crashing the report.
"""
from rich.console import Console
from typing import Any
from .logger import sanitize_for_terminal, is_utf8_capable


class SafeConsole(Console):
    """Console that sanitizes string output on non-UTF-8 terminals.

    Rich renderables (tables, panels) are passed through untouched; when
    sanitizing, the console falls back to ASCII box drawing for them.
    """

    def __init__(self, *args, **kwargs):
        """All arguments are passed through to Rich's Console."""
        self._needs_sanitization = not is_utf8_capable()

        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)

        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        """Print with automatic Unicode sanitization of string objects."""
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
