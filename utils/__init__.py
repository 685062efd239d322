"""Shared utilities package for gdocs-sync"""

from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logger",
]
