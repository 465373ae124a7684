"""Value types for the OAuth1 domain.

These live in a separate module to avoid circular imports between the
signer, the token exchange and the client facade.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional

from oauthkit.domains.oauth1.exceptions import ProtocolViolation

HMAC_SHA1 = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
OUT_OF_BAND = "oob"


class ExchangeState(str, Enum):
    """Lifecycle of one three-legged handshake."""

    INIT = "init"
    REQUEST_TOKEN_SENT = "request_token_sent"
    REQUEST_TOKEN_RECEIVED = "request_token_received"
    ACCESS_TOKEN_SENT = "access_token_sent"
    ACCESS_TOKEN_RECEIVED = "access_token_received"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True once the handshake has succeeded or failed."""
        return self in (ExchangeState.ACCESS_TOKEN_RECEIVED, ExchangeState.FAILED)


@dataclass(frozen=True)
class Token:
    """A token/secret pair, optionally carrying the verifier from user authorization.

    Request tokens and access tokens share this shape. Fields a provider
    returns beyond ``oauth_token`` and ``oauth_token_secret`` (e.g. ``user_id``)
    are kept in ``extra``.
    """

    token: str
    secret: str = field(repr=False)
    verifier: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict, compare=False)

    def with_verifier(self, verifier: str) -> "Token":
        """Return a copy of this token carrying ``verifier``."""
        return replace(self, verifier=verifier, extra=dict(self.extra))

    @classmethod
    def from_callback(cls, request_token: "Token", query: Mapping[str, str]) -> "Token":
        """Attach the verifier from the provider's callback redirect.

        Args:
            request_token: Token returned by the request-token step.
            query: Parsed callback query, holding ``oauth_token`` and ``oauth_verifier``.

        Raises:
            ProtocolViolation: If the callback is for a different token or has no verifier.
        """
        callback_token = query.get("oauth_token")
        if callback_token is not None and callback_token != request_token.token:
            raise ProtocolViolation("Callback oauth_token does not match the request token")
        verifier = query.get("oauth_verifier")
        if not verifier:
            raise ProtocolViolation("Callback is missing oauth_verifier")
        return request_token.with_verifier(verifier)


@dataclass(frozen=True)
class SigningContext:
    """Everything needed to sign one request. Never reused across requests."""

    method: str
    path: str
    callback: Optional[str] = None
    token: Optional[Token] = None
    body: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class SignedRequest:
    """Result of signing: where to send the request and the header to send."""

    method: str
    url: str
    authorization: str
    oauth_params: Dict[str, str]

    @property
    def headers(self) -> Dict[str, str]:
        """Headers carrying the signature."""
        return {"Authorization": self.authorization}
