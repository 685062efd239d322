"""Authorized Google API client: client config plus the current token set"""

import logging
from typing import Any, Dict, Optional

import httpx

from google_oauth import OAuthClientConfig, TokenSet, refresh_access_token
from docsync.errors import AuthFailedError
from .base import Credential

logger = logging.getLogger(__name__)


class AuthorizedClient(Credential):
    """Google OAuth client handle

    Expired access tokens are refreshed in memory before a request; the
    persisted token blob is left untouched, since the refresh token is
    what makes it valid.
    """

    def __init__(self, config: OAuthClientConfig):
        self.config = config
        self.tokens: Optional[TokenSet] = None

    def set_credentials(self, tokens: Dict[str, Any]) -> None:
        self.tokens = TokenSet.from_dict(tokens)

    @property
    def has_credentials(self) -> bool:
        return self.tokens is not None

    async def get_access_token(self, http: Optional[httpx.AsyncClient] = None) -> str:
        """Current access token, refreshed first when expired

        Raises:
            AuthFailedError: If there are no tokens or the refresh fails
        """
        if self.tokens is None:
            raise AuthFailedError("Client has no credentials; authorize first")

        if self.tokens.is_expired():
            self.tokens = await refresh_access_token(self.config, self.tokens, http=http)
            logger.info("Access token refreshed")

        return self.tokens.access_token

    async def auth_headers(self, http: Optional[httpx.AsyncClient] = None) -> Dict[str, str]:
        token = await self.get_access_token(http)
        return {"Authorization": f"{self.tokens.token_type} {token}"}
