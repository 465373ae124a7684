"""OAuth1 client facade.

Holds the consumer credentials and target API, signs arbitrary requests and
runs the request-token / access-token handshake. Instances are immutable and
safe to share between concurrent tasks: nonces and timestamps are drawn per
call.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit

import httpx

from oauthkit.core.config import settings
from oauthkit.core.logging import ContextualLogger
from oauthkit.core.logging import logger as default_logger
from oauthkit.domains.oauth1.exceptions import UnsupportedAlgorithm
from oauthkit.domains.oauth1.exchange import TokenExchange, build_authorization_url
from oauthkit.domains.oauth1.http import send_signed
from oauthkit.domains.oauth1.protocols import Clock, NonceSource
from oauthkit.domains.oauth1.signer import RequestSigner
from oauthkit.domains.oauth1.types import HMAC_SHA1, SignedRequest, SigningContext, Token

DEFAULT_PORTS = {"https": 443, "http": 80}


def normalize_host(api_url: str) -> Tuple[str, bool]:
    """Return ``(host, secure)`` for ``api_url``.

    The host is lowercased; the port is appended only when it differs from the
    scheme's default (443 for https, 80 for http).
    """
    parsed = urlsplit(api_url if "//" in api_url else f"//{api_url}", scheme="http")
    if not parsed.hostname:
        raise ValueError(f"API URL has no host: {api_url!r}")

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ValueError(f"Unsupported API URL scheme: {parsed.scheme!r}")
    secure = scheme == "https"

    host = parsed.hostname.lower()
    port = parsed.port
    if port is not None and port != DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"
    return host, secure


@dataclass(frozen=True)
class OAuthClient:
    """OAuth 1.0a consumer bound to one provider API."""

    consumer_key: str
    consumer_secret: str = field(repr=False)
    api_url: str
    signature_method: str = HMAC_SHA1
    clock: Optional[Clock] = field(default=None, repr=False, compare=False)
    nonce_source: Optional[NonceSource] = field(default=None, repr=False, compare=False)
    timeout: float = field(default_factory=lambda: settings.HTTP_TIMEOUT_SECONDS)
    transport: Optional[httpx.AsyncBaseTransport] = field(
        default=None, repr=False, compare=False
    )
    host: str = field(init=False)
    secure: bool = field(init=False)

    def __post_init__(self) -> None:
        """Validate the signature method and normalize the API host."""
        if self.signature_method != HMAC_SHA1:
            raise UnsupportedAlgorithm(self.signature_method)
        host, secure = normalize_host(self.api_url)
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "secure", secure)

    @property
    def base_url(self) -> str:
        """Scheme plus normalized host, used as the signature base URL."""
        return f"{'https' if self.secure else 'http'}://{self.host}"

    def signer(self) -> RequestSigner:
        """Request signer bound to this client's credentials."""
        return RequestSigner(
            self, self.base_url, clock=self.clock, nonce_source=self.nonce_source
        )

    def authorization_header(self, context: SigningContext) -> Tuple[str, Dict[str, str]]:
        """Return the ``Authorization`` header and final OAuth parameters for ``context``."""
        return self.signer().build_authorization_header(context)

    def sign(self, context: SigningContext) -> SignedRequest:
        """Sign an arbitrary request."""
        return self.signer().sign(context)

    def exchange(self, logger: Optional[ContextualLogger] = None) -> TokenExchange:
        """Start a new request-token / access-token handshake."""
        return TokenExchange(
            self.signer(),
            timeout=self.timeout,
            transport=self.transport,
            logger=(logger or default_logger).with_context(host=self.host),
        )

    async def request_token(self, path: str, callback_url: Optional[str] = None) -> Token:
        """Obtain a request token. See ``TokenExchange.request_token``."""
        return await self.exchange().request_token(path, callback_url)

    async def access_token(self, path: str, token: Token) -> Token:
        """Exchange an authorized request token. See ``TokenExchange.access_token``."""
        return await self.exchange().access_token(path, token)

    def authorization_url(self, authorization_url: str, token: Token, **params: str) -> str:
        """URL the end user visits to authorize ``token``."""
        return build_authorization_url(authorization_url, token, **params)

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[Token] = None,
        data: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> httpx.Response:
        """Send a signed request to the API and return the response unchanged.

        Form ``data`` is signed along with the OAuth parameters and sent as an
        ``application/x-www-form-urlencoded`` body.

        Raises:
            TransportError: If the provider could not be reached.
        """
        signed = self.sign(SigningContext(method=method, path=path, token=token, body=data))
        return await send_signed(
            signed,
            logger=(logger or default_logger).with_context(host=self.host),
            data=data,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )
