"""Three-legged OAuth1 token exchange.

1. Obtain temporary credentials (request token)
2. Redirect user for authorization
3. Exchange the verifier for access token credentials

Each ``TokenExchange`` tracks one handshake. Nothing is retried: a signed
request replayed with a stale nonce would be rejected anyway, so retry policy
belongs to the caller.

Reference: RFC 5849 - The OAuth 1.0 Protocol
"""

from typing import Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from oauthkit.core.config import settings
from oauthkit.core.logging import ContextualLogger
from oauthkit.core.logging import logger as default_logger
from oauthkit.domains.oauth1.exceptions import (
    InvalidExchangeState,
    MalformedResponse,
    MissingVerifier,
    ProtocolViolation,
)
from oauthkit.domains.oauth1.http import send_signed
from oauthkit.domains.oauth1.signer import RequestSigner
from oauthkit.domains.oauth1.types import ExchangeState, SigningContext, Token


def parse_token_response(response: httpx.Response) -> Token:
    """Read a form-encoded token response into a Token.

    Surrounding whitespace and empty fields (e.g. a trailing ``&``) are ignored.

    Raises:
        MalformedResponse: If the body is not form data or lacks the token pair.
    """
    fields: Dict[str, str] = dict(
        (k, v.strip())
        for k, v in parse_qsl(response.text.strip(), keep_blank_values=True)
    )

    if "oauth_token" not in fields or "oauth_token_secret" not in fields:
        raise MalformedResponse(
            "Response is missing oauth_token or oauth_token_secret", body=response.text
        )

    return Token(
        token=fields.pop("oauth_token"),
        secret=fields.pop("oauth_token_secret"),
        extra=fields,
    )


def build_authorization_url(authorization_url: str, token: Token, **params: str) -> str:
    """Build the URL the end user visits to authorize ``token``.

    Extra keyword arguments (e.g. ``name``, ``scope``, ``expiration``) are added
    as query parameters; an existing query on ``authorization_url`` is kept.
    """
    scheme, netloc, path, query, fragment = urlsplit(authorization_url)
    pairs = parse_qsl(query, keep_blank_values=True)
    pairs.append(("oauth_token", token.token))
    pairs.extend((k, v) for k, v in params.items() if v)
    return urlunsplit((scheme, netloc, path, urlencode(pairs), fragment))


class TokenExchange:
    """State machine for one request-token / access-token handshake."""

    def __init__(
        self,
        signer: RequestSigner,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize a handshake in the INIT state."""
        self._signer = signer
        self._timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport
        self._logger = logger or default_logger
        self._state = ExchangeState.INIT

    @property
    def state(self) -> ExchangeState:
        """Current handshake state."""
        return self._state

    def _transition(self, new_state: ExchangeState) -> None:
        self._logger.debug(f"OAuth1 exchange {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _require(self, operation: str, *allowed: ExchangeState) -> None:
        if self._state not in allowed:
            raise InvalidExchangeState(operation, self._state.value)

    async def _post(self, context: SigningContext) -> httpx.Response:
        signed = self._signer.sign(context)
        return await send_signed(
            signed,
            logger=self._logger,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def request_token(self, path: str, callback_url: Optional[str] = None) -> Token:
        """Obtain temporary credentials (request token) from the provider.

        Args:
            path: Provider's request token endpoint path ("Temporary Credentials Request").
            callback_url: Where the provider redirects after authorization.
                Defaults to out-of-band mode.

        Returns:
            Request token with its secret.

        Raises:
            TransportError: If the provider could not be reached.
            ProtocolViolation: On a non-200 status or unconfirmed callback.
            MalformedResponse: If the body cannot be parsed.
        """
        self._require("request_token", ExchangeState.INIT)
        callback_url = callback_url or settings.DEFAULT_CALLBACK

        self._logger.info(f"Requesting OAuth1 temporary credentials from {path}")
        self._transition(ExchangeState.REQUEST_TOKEN_SENT)
        try:
            response = await self._post(
                SigningContext(method="POST", path=path, callback=callback_url)
            )

            if response.status_code != 200:
                self._logger.error(
                    f"Error fetching request token: {response.status_code} - {response.text}"
                )
                raise ProtocolViolation(
                    f"Request token endpoint returned {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                )

            token = parse_token_response(response)

            confirmed = token.extra.get("oauth_callback_confirmed", "")
            if confirmed.lower() != "true":
                self._logger.error(f"Provider did not confirm callback: {response.text}")
                raise ProtocolViolation(
                    "Provider did not confirm the callback (oauth_callback_confirmed)",
                    status_code=response.status_code,
                    body=response.text,
                )
        except Exception:
            self._transition(ExchangeState.FAILED)
            raise

        self._transition(ExchangeState.REQUEST_TOKEN_RECEIVED)
        self._logger.info("Successfully obtained OAuth1 temporary credentials")
        return token

    async def access_token(self, path: str, token: Token) -> Token:
        """Exchange an authorized request token for access token credentials.

        Args:
            path: Provider's access token endpoint path ("Token Request URI").
            token: Request token carrying the verifier from the callback redirect.

        Returns:
            Access token with its secret and no verifier.

        Raises:
            MissingVerifier: If ``token`` has no verifier. Nothing is sent.
            TransportError: If the provider could not be reached.
            ProtocolViolation: On a non-200 status.
            MalformedResponse: If the body cannot be parsed.
        """
        self._require("access_token", ExchangeState.INIT, ExchangeState.REQUEST_TOKEN_RECEIVED)
        if not token.verifier:
            raise MissingVerifier()

        self._logger.info(f"Exchanging OAuth1 temporary credentials for access token at {path}")
        self._transition(ExchangeState.ACCESS_TOKEN_SENT)
        try:
            response = await self._post(SigningContext(method="POST", path=path, token=token))

            if response.status_code != 200:
                self._logger.error(
                    f"Error fetching access token: {response.status_code} - {response.text}"
                )
                raise ProtocolViolation(
                    f"Access token endpoint returned {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                )

            access = parse_token_response(response)
        except Exception:
            self._transition(ExchangeState.FAILED)
            raise

        self._transition(ExchangeState.ACCESS_TOKEN_RECEIVED)
        self._logger.info("Successfully obtained OAuth1 access token")
        return access
