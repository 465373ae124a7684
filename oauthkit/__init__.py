"""oauthkit - three-legged OAuth 1.0a client with HMAC-SHA1 request signing."""

from oauthkit.core.version import __version__
from oauthkit.domains.oauth1 import (
    OAuthClient,
    SignedRequest,
    SigningContext,
    Token,
    TokenExchange,
)

__all__ = [
    "OAuthClient",
    "SignedRequest",
    "SigningContext",
    "Token",
    "TokenExchange",
    "__version__",
]
