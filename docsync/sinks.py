"""User-facing side effects: notices, clipboard and browser launch"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from typing import Optional

import pyperclip
from rich.console import Console

logger = logging.getLogger(__name__)


class Sink(ABC):
    """Fire-and-forget side effects the sync core calls into"""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a short transient status message"""

    @abstractmethod
    def copy_link(self, url: str) -> None:
        """Place a link on the clipboard"""

    @abstractmethod
    def launch(self, url: str) -> None:
        """Open a URL in the system browser"""


class ConsoleSink(Sink):
    """Sink for terminal use: rich console, system clipboard, default browser"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, message: str) -> None:
        logger.info(f"Notice: {message}")
        self.console.print(f"[bold cyan]›[/bold cyan] {message}")

    def copy_link(self, url: str) -> None:
        try:
            pyperclip.copy(url)
            logger.debug("Copied link to clipboard")
        except pyperclip.PyperclipException as e:
            # No clipboard mechanism (e.g. headless Linux): print the link instead
            logger.warning(f"Clipboard unavailable: {e}")
            self.console.print(f"[dim]{url}[/dim]")

    def launch(self, url: str) -> None:
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open browser: {e}")
            opened = False

        if not opened:
            self.console.print("[yellow]⚠ Could not open browser automatically[/yellow]")
            self.console.print(f"Please open this URL in your browser:\n[cyan]{url}[/cyan]")
