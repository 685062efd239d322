"""OAuth credential acquisition with a single in-flight authorization flow"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Dict, Optional, Set

from settings import BROWSER_LAUNCH_DELAY
from .errors import AuthFailedError, AuthInProgressError, ConfigurationError
from .settings_store import Settings
from .sinks import Sink

if TYPE_CHECKING:
    from docs_store.base import Credential, DocumentStore, ServerHandle

logger = logging.getLogger(__name__)

AUTHENTICATE_NOTICE = (
    "Authenticate to continue. A browser window will open and "
    "authorization url is copied to clipboard."
)
AUTHENTICATED_NOTICE = "Authentication complete!"


class AuthController:
    """Produces a usable credential for one application credential.

    A cached token is reused while the store accepts it. Otherwise a
    browser authorization round-trip runs; while it is pending any other
    ``get_auth`` call is rejected with AuthInProgressError.
    """

    def __init__(
        self,
        settings: Settings,
        store: "DocumentStore",
        sink: Sink,
        persist: Callable[[Settings], None],
        browser_delay: float = BROWSER_LAUNCH_DELAY,
    ):
        """
        Args:
            settings: Settings record; only ``tokens`` is ever changed here
            store: Remote document store used for client construction and token requests
            sink: Notification, clipboard and browser side effects
            persist: Saves the settings record after a new token is obtained
            browser_delay: Seconds between the notice and the browser launch
        """
        self.settings = settings
        self.store = store
        self.sink = sink
        self.persist = persist
        self.browser_delay = browser_delay
        self._pending_server: Optional["ServerHandle"] = None
        self._claimed = False
        self._background: Set["asyncio.Task[None]"] = set()

    @property
    def is_authenticating(self) -> bool:
        """Whether an authorization round-trip is in progress"""
        return self._claimed

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[None]:
        """Claim the single authorization slot; released on every exit path"""
        if self._claimed:
            raise AuthInProgressError()
        self._claimed = True
        try:
            yield
        finally:
            server, self._pending_server = self._pending_server, None
            self._claimed = False
            if server is not None:
                await server.stop()

    def _load_tokens(self) -> Optional[Dict[str, Any]]:
        """Deserialize the cached token blob

        Raises:
            ConfigurationError: If the blob is not valid JSON
        """
        blob = self.settings.tokens
        if not blob or not blob.strip():
            return None
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Stored Google tokens are not valid JSON: {e}") from e

    async def get_auth(self) -> "Credential":
        """Return an authorized client, running the browser flow when needed

        Raises:
            ConfigurationError: Credentials missing or malformed, token blob unparseable
            AuthInProgressError: Another authorization is pending
            AuthFailedError: The authorization round-trip failed
        """
        if not self.settings.credentials.strip():
            raise ConfigurationError("Google application credentials are not set.")

        if self._claimed:
            logger.info("Rejected authorization request: another one is pending")
            raise AuthInProgressError()

        client = self.store.get_client(self.settings.credentials)
        tokens = self._load_tokens()

        if await self.store.has_valid_token(client, tokens):
            client.set_credentials(tokens)
            logger.debug("Using cached Google token")
            return client

        # The validity check may have yielded; re-check the slot atomically
        async with self._session():
            await self._authorize(client)

        return client

    async def _authorize(self, client: "Credential") -> None:
        logger.info("Starting Google authorization flow")
        try:
            server, authorize_url, token_future = await self.store.get_new_token(client)
        except OSError as e:
            logger.error(f"Could not start the authorization listener: {e}")
            raise AuthFailedError(f"Could not start the authorization listener: {e}") from e
        self._pending_server = server

        try:
            self.sink.notify(AUTHENTICATE_NOTICE)
            self.sink.copy_link(authorize_url)
            self._schedule_launch(authorize_url)

            try:
                tokens = await token_future
            except AuthFailedError:
                raise
            except Exception as e:
                logger.error(f"Authorization failed: {e}")
                raise AuthFailedError(f"Authentication failed: {e}") from e
        finally:
            if not token_future.done():
                token_future.cancel()
            # The round-trip can finish before the browser delay elapses
            self._cancel_launches()

        self.settings.tokens = json.dumps(tokens)
        self.persist(self.settings)
        logger.info("Saved new Google tokens")
        self.sink.notify(AUTHENTICATED_NOTICE)

    def _schedule_launch(self, url: str) -> None:
        """Open the browser after the configured delay without blocking the flow"""
        task = asyncio.ensure_future(self._delayed_launch(url))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _cancel_launches(self) -> None:
        for task in list(self._background):
            task.cancel()

    async def _delayed_launch(self, url: str) -> None:
        if self.browser_delay > 0:
            await asyncio.sleep(self.browser_delay)
        self.sink.launch(url)

    def logout(self) -> None:
        """Forget the cached token so the next call authorizes again

        Raises:
            AuthInProgressError: While an authorization is pending
        """
        if self._claimed:
            raise AuthInProgressError()
        self.settings.tokens = ""
        self.persist(self.settings)
        logger.info("Cleared stored Google tokens")
