"""
Local loopback server that receives the OAuth redirect
"""
import asyncio
import logging
from typing import Optional

from aiohttp import web

from settings import OAUTH_CALLBACK_HOST, OAUTH_CALLBACK_PORT, OAUTH_CALLBACK_PATH

logger = logging.getLogger(__name__)

SUCCESS_PAGE = """
<html>
    <body>
        <h1>Authentication Successful!</h1>
        <p>You can now close this window and return to your editor.</p>
        <script>
            setTimeout(function() {
                window.close();
            }, 2000);
        </script>
    </body>
</html>
"""

FAILURE_PAGE = """
<html>
    <body>
        <h1>Authentication Failed</h1>
        <p>Error: {error}</p>
        <p>You can close this window.</p>
    </body>
</html>
"""


class CallbackResult:
    """OAuth callback result"""

    def __init__(self, code: Optional[str] = None, state: Optional[str] = None, error: Optional[str] = None):
        self.code = code
        self.state = state
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.code)


class OAuthCallbackServer:
    """Local HTTP server for the OAuth redirect

    Serves a single callback path and records the first request whose
    state matches, whether it carries a code or an error.
    """

    def __init__(
        self,
        expected_state: str,
        host: str = OAUTH_CALLBACK_HOST,
        port: int = OAUTH_CALLBACK_PORT,
        path: str = OAUTH_CALLBACK_PATH,
    ):
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self.path = path
        self.result: Optional[CallbackResult] = None
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._event = asyncio.Event()

        self.app.router.add_get(self.path, self._handle_callback)

    @property
    def redirect_uri(self) -> str:
        """Redirect URI for the bound address (valid after start)"""
        return f"http://{self.host}:{self.port}{self.path}"

    @property
    def running(self) -> bool:
        return self.runner is not None

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        code = request.query.get("code")
        state = request.query.get("state")
        error = request.query.get("error")

        # Validate state (CSRF protection)
        if state != self.expected_state:
            logger.warning("OAuth callback with mismatched state ignored")
            return web.Response(text="Invalid state parameter", status=400)

        if error:
            logger.warning(f"OAuth error: {error}")
            self._finish(CallbackResult(state=state, error=error))
            return web.Response(
                text=FAILURE_PAGE.format(error=error),
                content_type="text/html",
                status=400,
            )

        if not code:
            return web.Response(text="Missing code parameter", status=400)

        self._finish(CallbackResult(code=code, state=state))
        return web.Response(text=SUCCESS_PAGE, content_type="text/html")

    def _finish(self, result: CallbackResult) -> None:
        if self.result is None:
            self.result = result
        self._event.set()

    async def start(self) -> None:
        """Start the callback server"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        try:
            await site.start()
        except OSError as e:
            logger.error(f"Could not bind OAuth callback server to {self.host}:{self.port}: {e}")
            runner, self.runner = self.runner, None
            await runner.cleanup()
            raise

        # Port 0 binds an ephemeral port; record the real one for the redirect URI
        for address in self.runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                self.port = address[1]
                break

        logger.info(f"OAuth callback server listening on {self.redirect_uri}")

    async def wait_for_callback(self, timeout: float = 300) -> Optional[CallbackResult]:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum time to wait in seconds (default 5 minutes)

        Returns:
            CallbackResult once the browser redirects back, None on timeout
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
            return self.result
        except asyncio.TimeoutError:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            return None

    async def stop(self) -> None:
        """Stop the callback server (safe to call more than once)"""
        if self.runner:
            runner, self.runner = self.runner, None
            await runner.cleanup()
            logger.debug("OAuth callback server stopped")


async def start_callback_server(
    expected_state: str,
    host: str = OAUTH_CALLBACK_HOST,
    port: int = OAUTH_CALLBACK_PORT,
    path: str = OAUTH_CALLBACK_PATH,
) -> OAuthCallbackServer:
    """
    Start OAuth callback server.

    Args:
        expected_state: Expected state parameter for CSRF protection
        host: Interface to bind
        port: Port to bind (0 for an ephemeral port)
        path: Callback path

    Returns:
        OAuthCallbackServer instance
    """
    server = OAuthCallbackServer(expected_state, host=host, port=port, path=path)
    await server.start()
    return server
