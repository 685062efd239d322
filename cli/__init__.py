"""CLI package for gdocs-sync

This package provides the command-line interface for pushing markdown
files to Google Docs and managing the stored Google settings.
"""

from cli.cli_app import DocSyncCLI
from cli.main import main

__all__ = [
    "DocSyncCLI",
    "main",
]
