"""
Google OAuth client configuration parsing

The credentials blob is the client-secrets JSON downloaded from the Google
Cloud Console, with either an ``installed`` or a ``web`` section.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import List

from settings import GOOGLE_AUTHORIZE_URL, GOOGLE_TOKEN_URL
from docsync.errors import ConfigurationError

logger = logging.getLogger(__name__)

CLIENT_SECTIONS = ("installed", "web")


@dataclass(frozen=True)
class OAuthClientConfig:
    """OAuth application credential

    Attributes:
        client_id: OAuth client identifier
        client_secret: OAuth client secret (installed apps treat it as non-confidential)
        auth_uri: Authorization endpoint
        token_uri: Token endpoint
        redirect_uris: Redirect URIs registered for the client
    """
    client_id: str
    client_secret: str
    auth_uri: str = GOOGLE_AUTHORIZE_URL
    token_uri: str = GOOGLE_TOKEN_URL
    redirect_uris: List[str] = field(default_factory=list)


def parse_client_config(credentials_blob: str) -> OAuthClientConfig:
    """
    Build a client configuration from a client-secrets JSON string.

    Pure construction, no network access.

    Args:
        credentials_blob: Client-secrets JSON content

    Returns:
        OAuthClientConfig

    Raises:
        ConfigurationError: If the blob is empty, not JSON, or lacks client_id/client_secret
    """
    if not credentials_blob or not credentials_blob.strip():
        raise ConfigurationError("Google application credentials are not set.")

    try:
        data = json.loads(credentials_blob)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Google application credentials are not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Google application credentials must be a JSON object.")

    # Accept both the wrapped client-secrets layout and a bare section
    section = data
    for name in CLIENT_SECTIONS:
        if isinstance(data.get(name), dict):
            section = data[name]
            break

    client_id = section.get("client_id")
    client_secret = section.get("client_secret")
    if not client_id or not client_secret:
        raise ConfigurationError(
            "Google application credentials must contain client_id and client_secret."
        )

    redirect_uris = section.get("redirect_uris") or []
    if not isinstance(redirect_uris, list):
        redirect_uris = [str(redirect_uris)]

    config = OAuthClientConfig(
        client_id=client_id,
        client_secret=client_secret,
        auth_uri=section.get("auth_uri") or GOOGLE_AUTHORIZE_URL,
        token_uri=section.get("token_uri") or GOOGLE_TOKEN_URL,
        redirect_uris=list(redirect_uris),
    )
    logger.debug(f"Parsed OAuth client config for client {client_id[:12]}...")
    return config
