"""Main CLI application class for gdocs-sync"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from docs_store import DocumentStore, GoogleDocsStore
from docsync import (
    ConsoleSink,
    DocSyncError,
    SettingsStore,
    SyncOutcome,
    SyncResult,
    build_orchestrator,
)
from cli.status_display import show_settings, show_token_status

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_OPEN_COMMENTS = 2

# CLI key -> Settings attribute
SETTING_NAMES = {
    "folder": "folder_id",
    "credentials": "credentials",
    "tokens": "tokens",
}


class DocSyncCLI:
    """Command-line host for pushing and opening Google Docs"""

    def __init__(
        self,
        console: Optional[Console] = None,
        settings_store: Optional[SettingsStore] = None,
        store: Optional[DocumentStore] = None,
        browser_delay: Optional[float] = None,
    ):
        self.console = console or Console()
        self.settings_store = settings_store or SettingsStore()
        self.store = store
        self.browser_delay = browser_delay
        self.sink = ConsoleSink(self.console)

        # Create event loop
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def close(self) -> None:
        """Release the HTTP client and the event loop"""
        if self.loop.is_closed():
            return

        pending = asyncio.all_tasks(self.loop)
        for task in pending:
            task.cancel()
        if pending:
            self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))

        if isinstance(self.store, GoogleDocsStore):
            self.loop.run_until_complete(self.store.aclose())
        self.loop.close()

    def _orchestrator(self):
        if self.store is None:
            self.store = GoogleDocsStore()
        settings = self.settings_store.load()
        return build_orchestrator(
            settings,
            self.store,
            self.sink,
            self.settings_store.save,
            browser_delay=self.browser_delay,
        )

    def _report(self, result: SyncResult) -> int:
        if result.outcome is SyncOutcome.OPEN_COMMENTS:
            self.console.print(f"[yellow]✗ Not pushed:[/yellow] {result.link}")
            return EXIT_OPEN_COMMENTS
        self.console.print(f"[green]✓[/green] {result.link}")
        return EXIT_OK

    def push(self, path: Path) -> int:
        """Push a markdown file to its Google Doc"""
        path = Path(path)
        if not path.is_file():
            self.console.print(f"[red]ERROR:[/red] No such file: {path}")
            return EXIT_ERROR

        try:
            orchestrator = self._orchestrator()
            result = self.loop.run_until_complete(orchestrator.push_file(path))
        except DocSyncError as e:
            # The orchestrator already showed the failure notice
            logger.debug(f"Push failed: {e}")
            return EXIT_ERROR
        return self._report(result)

    def open(self, path: Path) -> int:
        """Open the Google Doc for a markdown file"""
        try:
            orchestrator = self._orchestrator()
            result = self.loop.run_until_complete(orchestrator.open_file(Path(path)))
        except DocSyncError as e:
            logger.debug(f"Open failed: {e}")
            return EXIT_ERROR
        return self._report(result)

    def login(self) -> int:
        """Make sure a usable token is cached, authorizing if needed"""
        try:
            orchestrator = self._orchestrator()
            self.loop.run_until_complete(orchestrator.auth.get_auth())
        except DocSyncError as e:
            self.console.print(f"[red]✗ {e.user_message}[/red]")
            return EXIT_ERROR

        self.console.print("[green]✓ Authenticated[/green]")
        return EXIT_OK

    def logout(self) -> int:
        """Forget the cached token"""
        try:
            self._orchestrator().auth.logout()
        except DocSyncError as e:
            self.console.print(f"[red]✗ {e.user_message}[/red]")
            return EXIT_ERROR

        self.console.print("[green]✓ Stored tokens cleared[/green]")
        return EXIT_OK

    def status(self) -> int:
        """Display token status"""
        try:
            show_token_status(self.settings_store.load(), self.console)
        except DocSyncError as e:
            self.console.print(f"[red]✗ {e.user_message}[/red]")
            return EXIT_ERROR
        return EXIT_OK

    def show_config(self) -> int:
        """Display settings with secrets redacted"""
        try:
            show_settings(self.settings_store.load(), self.settings_store.settings_file, self.console)
        except DocSyncError as e:
            self.console.print(f"[red]✗ {e.user_message}[/red]")
            return EXIT_ERROR
        return EXIT_OK

    def set_config(self, name: str, value: Optional[str] = None, file: Optional[Path] = None) -> int:
        """Change one setting from a literal value or a file's content"""
        attr = SETTING_NAMES.get(name)
        if attr is None:
            self.console.print(f"[red]ERROR:[/red] Unknown setting '{name}'. Choose from: {', '.join(SETTING_NAMES)}")
            return EXIT_ERROR

        if file is not None:
            try:
                value = Path(file).read_text(encoding="utf-8").strip()
            except OSError as e:
                self.console.print(f"[red]ERROR:[/red] Could not read {file}: {e}")
                return EXIT_ERROR

        if value is None:
            self.console.print("[red]ERROR:[/red] Provide a value or --file")
            return EXIT_ERROR

        try:
            self.settings_store.update(**{attr: value})
        except DocSyncError as e:
            self.console.print(f"[red]✗ {e.user_message}[/red]")
            return EXIT_ERROR

        self.console.print(f"[green]✓ Saved {name}[/green]")
        return EXIT_OK
