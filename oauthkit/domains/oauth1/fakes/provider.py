"""In-memory OAuth1 provider served through ``httpx.MockTransport``.

Verifies the HMAC-SHA1 signature of every incoming request, issues request
and access tokens, and records what it received for assertions.
"""

import hmac
import secrets
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, unquote, urlencode

import httpx

from oauthkit.domains.oauth1.codec import percent_encode
from oauthkit.domains.oauth1.signature import build_signature_base_string, sign_hmac_sha1

REQUEST_TOKEN_PATH = "/oauth/request_token"
ACCESS_TOKEN_PATH = "/oauth/access_token"


def parse_authorization_header(auth_header: str) -> Dict[str, str]:
    """Parse an OAuth Authorization header, keeping values percent-encoded."""
    if not auth_header.startswith("OAuth "):
        raise ValueError("Not an OAuth authorization header")

    params = {}
    for param in auth_header[len("OAuth ") :].split(","):
        param = param.strip()
        if "=" in param:
            key, value = param.split("=", 1)
            params[key] = value.strip('"')
    return params


class FakeOAuth1Provider:
    """Provider double for the three-legged flow.

    Seed consumers, hand ``transport`` to the client, and call ``authorize``
    to play the user approving a request token.
    """

    def __init__(
        self,
        consumers: Optional[Dict[str, str]] = None,
        *,
        confirm_callback: bool = True,
    ) -> None:
        self._consumers: Dict[str, str] = dict(consumers or {})
        self._request_tokens: Dict[str, str] = {}
        self._access_tokens: Dict[str, str] = {}
        self._verifiers: Dict[str, str] = {}
        self._seen_nonces: set = set()
        self._forced: Optional[Tuple[int, str]] = None
        self._error: Optional[Exception] = None
        self.confirm_callback = confirm_callback
        self.requests: List[httpx.Request] = []
        self.received_params: List[Dict[str, str]] = []
        self.transport = httpx.MockTransport(self._handle)

    # -- seeding helpers --

    def issue_access_token(self, token: str, secret: str) -> None:
        self._access_tokens[token] = secret

    def force_response(self, status_code: int, text: str) -> None:
        """Answer every following request with this canned response."""
        self._forced = (status_code, text)

    def set_error(self, error: Exception) -> None:
        """Raise ``error`` from the transport on every following request."""
        self._error = error

    def authorize(self, request_token: str) -> str:
        """Simulate the user approving ``request_token``; returns the verifier."""
        if request_token not in self._request_tokens:
            raise KeyError(f"Unknown request token: {request_token}")
        verifier = secrets.token_hex(8)
        self._verifiers[request_token] = verifier
        return verifier

    # -- request handling --

    def _token_secret(self, token: Optional[str]) -> str:
        if token is None:
            return ""
        return self._request_tokens.get(token) or self._access_tokens.get(token) or ""

    def _verify(self, request: httpx.Request) -> Optional[Dict[str, Any]]:
        try:
            params = parse_authorization_header(request.headers.get("Authorization", ""))
        except ValueError:
            return None

        signature = unquote(params.pop("oauth_signature", ""))
        consumer_secret = self._consumers.get(unquote(params.get("oauth_consumer_key", "")))
        if not signature or consumer_secret is None:
            return None

        nonce = (params.get("oauth_nonce"), params.get("oauth_timestamp"))
        if nonce in self._seen_nonces:
            return None
        self._seen_nonces.add(nonce)

        sig_params = dict(params)
        if request.content:
            for k, v in parse_qsl(request.content.decode("utf-8"), keep_blank_values=True):
                sig_params.setdefault(percent_encode(k), percent_encode(v))

        token = unquote(params["oauth_token"]) if "oauth_token" in params else None
        base_string = build_signature_base_string(request.method, str(request.url), sig_params)
        expected = sign_hmac_sha1(base_string, consumer_secret, self._token_secret(token))
        if not hmac.compare_digest(signature, expected):
            return None

        decoded = {k: unquote(v) for k, v in params.items()}
        self.received_params.append(decoded)
        return decoded

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if self._forced is not None:
            status_code, text = self._forced
            return httpx.Response(status_code, text=text)

        params = self._verify(request)
        if params is None:
            return httpx.Response(401, text="oauth_problem=signature_invalid")

        if request.url.path == REQUEST_TOKEN_PATH:
            token, secret = secrets.token_hex(8), secrets.token_hex(16)
            self._request_tokens[token] = secret
            body = {"oauth_token": token, "oauth_token_secret": secret}
            if self.confirm_callback:
                body["oauth_callback_confirmed"] = "true"
            return httpx.Response(200, text=urlencode(body))

        if request.url.path == ACCESS_TOKEN_PATH:
            token = params.get("oauth_token", "")
            expected_verifier = self._verifiers.pop(token, None)
            if expected_verifier is None or params.get("oauth_verifier") != expected_verifier:
                return httpx.Response(401, text="oauth_problem=verifier_invalid")
            del self._request_tokens[token]
            access, secret = secrets.token_hex(8), secrets.token_hex(16)
            self._access_tokens[access] = secret
            return httpx.Response(
                200,
                text=urlencode(
                    {"oauth_token": access, "oauth_token_secret": secret, "user_id": "42"}
                ),
            )

        token = params.get("oauth_token")
        if token not in self._access_tokens:
            return httpx.Response(401, text="oauth_problem=token_rejected")
        return httpx.Response(200, json={"ok": True, "path": request.url.path})
