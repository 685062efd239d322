"""
Google OAuth authentication module
"""
from .client_config import (
    OAuthClientConfig,
    parse_client_config,
)
from .authorization import (
    PKCEPair,
    AuthorizationFlow,
    generate_pkce,
    create_state,
    create_authorization_flow,
)
from .token_exchange import (
    TokenSet,
    exchange_code_for_tokens,
    refresh_access_token,
)
from .callback_server import (
    CallbackResult,
    OAuthCallbackServer,
    start_callback_server,
)

__all__ = [
    # Client configuration
    "OAuthClientConfig",
    "parse_client_config",
    # Authorization
    "PKCEPair",
    "AuthorizationFlow",
    "generate_pkce",
    "create_state",
    "create_authorization_flow",
    # Token Exchange
    "TokenSet",
    "exchange_code_for_tokens",
    "refresh_access_token",
    # Callback Server
    "CallbackResult",
    "OAuthCallbackServer",
    "start_callback_server",
]
