"""
Authorization URL construction for Google's installed-app flow (PKCE, S256)
"""
import base64
import hashlib
import secrets
from typing import NamedTuple, Optional, Sequence
from urllib.parse import urlencode

from settings import SCOPES
from .client_config import OAuthClientConfig

# 64 random bytes encode to 86 characters, inside RFC 7636's 43-128 range
VERIFIER_BYTES = 64
STATE_BYTES = 32


class PKCEPair(NamedTuple):
    """Code verifier kept locally and the challenge sent to Google"""
    verifier: str
    challenge: str


class AuthorizationFlow(NamedTuple):
    """Everything needed to finish a started authorization"""
    pkce: PKCEPair
    state: str
    redirect_uri: str
    url: str


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_pkce() -> PKCEPair:
    """
    Create a fresh verifier and its S256 challenge.

    Returns:
        PKCEPair
    """
    verifier = secrets.token_urlsafe(VERIFIER_BYTES)
    return PKCEPair(verifier=verifier, challenge=_b64url(hashlib.sha256(verifier.encode("ascii")).digest()))


def create_state() -> str:
    """Random value the callback server checks against CSRF"""
    return secrets.token_urlsafe(STATE_BYTES)


def create_authorization_flow(
    client: OAuthClientConfig,
    redirect_uri: str,
    scopes: Sequence[str] = SCOPES,
    state: Optional[str] = None,
) -> AuthorizationFlow:
    """
    Create a Google OAuth authorization flow.

    Requests offline access with a forced consent prompt so Google always
    returns a refresh token.

    Args:
        client: OAuth client configuration
        redirect_uri: Loopback redirect URI of the running callback server
        scopes: OAuth scopes to request
        state: State already handed to the callback server (generated if omitted)

    Returns:
        AuthorizationFlow: Tuple of (pkce, state, redirect_uri, url)
    """
    pkce = generate_pkce()
    state = state or create_state()

    params = {
        "response_type": "code",
        "client_id": client.client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "state": state,
        "code_challenge": pkce.challenge,
        "code_challenge_method": "S256",
        "access_type": "offline",
        "prompt": "consent",
    }

    url = f"{client.auth_uri}?{urlencode(params)}"

    return AuthorizationFlow(pkce=pkce, state=state, redirect_uri=redirect_uri, url=url)
