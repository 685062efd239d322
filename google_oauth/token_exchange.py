"""
Google OAuth token exchange and refresh
"""
import logging
import time
from typing import Any, Dict, Iterable, Optional

import httpx

from settings import REQUEST_TIMEOUT
from docsync.errors import AuthFailedError
from .client_config import OAuthClientConfig

logger = logging.getLogger(__name__)

# Treat access tokens as expired this long before their actual expiry
EXPIRY_BUFFER_SECONDS = 60


class TokenSet:
    """OAuth token set

    Serialized with the field names used by Google's client libraries
    (``expiry_date`` in epoch milliseconds), so stored blobs stay portable.
    """

    def __init__(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        expiry_date: Optional[int] = None,
        scope: str = "",
        token_type: str = "Bearer",
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expiry_date = expiry_date
        self.scope = scope
        self.token_type = token_type

    @property
    def scopes(self) -> set:
        return set(self.scope.split()) if self.scope else set()

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if access token is expired (with a one minute buffer)"""
        if self.expiry_date is None:
            return False
        now_ms = (now if now is not None else time.time()) * 1000
        return now_ms >= self.expiry_date - EXPIRY_BUFFER_SECONDS * 1000

    def has_scopes(self, required: Iterable[str]) -> bool:
        """Check that every required scope was granted

        A token without a recorded scope is accepted, as older blobs omit it.
        """
        if not self.scope:
            return True
        return set(required).issubset(self.scopes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        data: Dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "scope": self.scope,
        }
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        if self.expiry_date is not None:
            data["expiry_date"] = self.expiry_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenSet":
        """Load from dictionary

        Raises:
            KeyError: If access_token is missing
            ValueError: If expiry_date is not numeric
        """
        expiry = data.get("expiry_date")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expiry_date=int(expiry) if expiry is not None else None,
            scope=data.get("scope", ""),
            token_type=data.get("token_type", "Bearer"),
        )

    @classmethod
    def from_response(
        cls,
        data: Dict[str, Any],
        previous_refresh_token: Optional[str] = None,
    ) -> "TokenSet":
        """Build from a token endpoint response

        Args:
            data: Token endpoint JSON body
            previous_refresh_token: Kept when the response carries no new refresh token
        """
        expiry_date = None
        if "expires_in" in data:
            expiry_date = int((time.time() + int(data["expires_in"])) * 1000)
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", previous_refresh_token),
            expiry_date=expiry_date,
            scope=data.get("scope", ""),
            token_type=data.get("token_type", "Bearer"),
        )


async def _post_token_request(
    client: OAuthClientConfig,
    form: Dict[str, str],
    http: Optional[httpx.AsyncClient],
) -> httpx.Response:
    if http is not None:
        return await http.post(client.token_uri, data=form)
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as owned:
        return await owned.post(client.token_uri, data=form)


async def exchange_code_for_tokens(
    client: OAuthClientConfig,
    code: str,
    code_verifier: str,
    redirect_uri: str,
    http: Optional[httpx.AsyncClient] = None,
) -> TokenSet:
    """
    Exchange authorization code for access and refresh tokens.

    Args:
        client: OAuth client configuration
        code: Authorization code from callback
        code_verifier: PKCE code verifier
        redirect_uri: OAuth redirect URI used for the authorization request
        http: Optional shared HTTP client

    Returns:
        TokenSet

    Raises:
        AuthFailedError: If the token endpoint rejects the code or is unreachable
    """
    form = {
        "grant_type": "authorization_code",
        "client_id": client.client_id,
        "client_secret": client.client_secret,
        "code": code,
        "code_verifier": code_verifier,
        "redirect_uri": redirect_uri,
    }

    try:
        response = await _post_token_request(client, form, http)
    except httpx.HTTPError as e:
        logger.error(f"Error during token exchange: {e}")
        raise AuthFailedError(f"Token exchange failed: {e}") from e

    if response.status_code != 200:
        logger.error(f"Token exchange failed: {response.status_code}")
        logger.debug(f"Response: {response.text}")
        raise AuthFailedError(f"Token exchange failed (HTTP {response.status_code})")

    tokens = TokenSet.from_response(response.json())
    logger.info("Exchanged authorization code for tokens")
    return tokens


async def refresh_access_token(
    client: OAuthClientConfig,
    tokens: TokenSet,
    http: Optional[httpx.AsyncClient] = None,
) -> TokenSet:
    """
    Refresh access token using refresh token.

    Args:
        client: OAuth client configuration
        tokens: Current token set (must carry a refresh token)
        http: Optional shared HTTP client

    Returns:
        New TokenSet; the refresh token is carried over when Google omits it

    Raises:
        AuthFailedError: If no refresh token is available or the refresh is rejected
    """
    if not tokens.refresh_token:
        raise AuthFailedError("Access token expired and no refresh token available")

    form = {
        "grant_type": "refresh_token",
        "client_id": client.client_id,
        "client_secret": client.client_secret,
        "refresh_token": tokens.refresh_token,
    }

    logger.info("Refreshing Google access token...")
    try:
        response = await _post_token_request(client, form, http)
    except httpx.HTTPError as e:
        logger.error(f"Error during token refresh: {e}")
        raise AuthFailedError(f"Token refresh failed: {e}") from e

    if response.status_code != 200:
        logger.error(f"Token refresh failed: {response.status_code}")
        logger.debug(f"Response: {response.text}")
        raise AuthFailedError(f"Token refresh failed (HTTP {response.status_code})")

    refreshed = TokenSet.from_response(response.json(), previous_refresh_token=tokens.refresh_token)
    if not refreshed.scope:
        refreshed.scope = tokens.scope
    return refreshed
