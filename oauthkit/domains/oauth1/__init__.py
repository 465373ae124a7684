"""OAuth1 domain - header-based OAuth 1.0a signing and the three-legged token exchange."""

from oauthkit.domains.oauth1.client import OAuthClient
from oauthkit.domains.oauth1.exceptions import (
    InvalidExchangeState,
    MalformedResponse,
    MissingVerifier,
    ProtocolViolation,
    TransportError,
    UnsupportedAlgorithm,
)
from oauthkit.domains.oauth1.exchange import TokenExchange, build_authorization_url
from oauthkit.domains.oauth1.signer import RequestSigner
from oauthkit.domains.oauth1.types import (
    ExchangeState,
    SignedRequest,
    SigningContext,
    Token,
)

__all__ = [
    "ExchangeState",
    "InvalidExchangeState",
    "MalformedResponse",
    "MissingVerifier",
    "OAuthClient",
    "ProtocolViolation",
    "RequestSigner",
    "SignedRequest",
    "SigningContext",
    "Token",
    "TokenExchange",
    "TransportError",
    "UnsupportedAlgorithm",
    "build_authorization_url",
]
