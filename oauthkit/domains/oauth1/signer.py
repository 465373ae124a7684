"""Header-based OAuth1 request signing.

The signer assembles the ``oauth_*`` parameter set for one request, folds in
any form body fields for the signature, computes ``oauth_signature`` last
and renders the ``Authorization`` header. It performs no I/O.
"""

import secrets
import time
from typing import Dict, Optional, Tuple

from oauthkit.domains.oauth1.codec import percent_encode
from oauthkit.domains.oauth1.protocols import Clock, ConsumerProtocol, NonceSource
from oauthkit.domains.oauth1.signature import generate_signature
from oauthkit.domains.oauth1.types import OAUTH_VERSION, SignedRequest, SigningContext


def generate_nonce() -> str:
    """Generate a cryptographically secure random nonce."""
    return secrets.token_urlsafe(32)


def get_timestamp() -> int:
    """Get current Unix timestamp."""
    return int(time.time())


class RequestSigner:
    """Signs requests on behalf of one consumer against one base URL."""

    def __init__(
        self,
        consumer: ConsumerProtocol,
        base_url: str,
        *,
        clock: Optional[Clock] = None,
        nonce_source: Optional[NonceSource] = None,
    ) -> None:
        """Initialize the signer.

        Args:
            consumer: Credentials and signature method of the application.
            base_url: Scheme and normalized host, e.g. ``https://api.example.com``.
            clock: Timestamp source; defaults to the system clock.
            nonce_source: Nonce source; defaults to ``secrets.token_urlsafe``.
        """
        self._consumer = consumer
        self._base_url = base_url.rstrip("/")
        self._clock = clock or get_timestamp
        self._nonce_source = nonce_source or generate_nonce

    def url_for(self, path: str) -> str:
        """Full request URL for ``path``."""
        if not path.startswith("/"):
            path = "/" + path
        return self._base_url + path

    def _oauth_params(self, context: SigningContext) -> Dict[str, str]:
        params = {
            "oauth_version": OAUTH_VERSION,
            "oauth_consumer_key": percent_encode(self._consumer.consumer_key),
            "oauth_signature_method": self._consumer.signature_method,
            "oauth_timestamp": str(self._clock()),
            "oauth_nonce": percent_encode(self._nonce_source()),
        }
        if context.callback:
            params["oauth_callback"] = percent_encode(context.callback)

        token = context.token
        if token is not None and token.verifier:
            params["oauth_verifier"] = percent_encode(token.verifier)
        if token is not None and token.token:
            params["oauth_token"] = percent_encode(token.token)
        return params

    def build_authorization_header(self, context: SigningContext) -> Tuple[str, Dict[str, str]]:
        """Build the ``Authorization`` header for ``context``.

        Returns:
            The header value and the final (encoded) OAuth parameter set,
            including ``oauth_signature``.
        """
        params = self._oauth_params(context)

        # Body fields are signed but never sent in the header.
        sig_params: Dict[str, str] = {}
        if context.body:
            for name, value in context.body.items():
                sig_params[percent_encode(name)] = percent_encode(value)
        sig_params.update(params)

        signature = generate_signature(
            context.method,
            self.url_for(context.path),
            sig_params,
            self._consumer,
            context.token.secret if context.token is not None else None,
        )
        params["oauth_signature"] = percent_encode(signature)

        header = "OAuth " + ", ".join(f'{k}="{v}"' for k, v in params.items())
        return header, params

    def sign(self, context: SigningContext) -> SignedRequest:
        """Sign ``context`` and return the request target plus header."""
        header, params = self.build_authorization_header(context)
        return SignedRequest(
            method=context.method.upper(),
            url=self.url_for(context.path),
            authorization=header,
            oauth_params=params,
        )
