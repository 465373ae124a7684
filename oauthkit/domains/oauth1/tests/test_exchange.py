"""Unit tests for TokenExchange.

Covers:
- request_token (confirmation, non-200, malformed bodies, transport errors)
- access_token (happy path, missing verifier, provider errors)
- state transitions and rejection of out-of-order calls
- build_authorization_url and Token.from_callback
"""

from dataclasses import dataclass, field
from typing import Optional, Type

import httpx
import pytest

from oauthkit.core.logging import logger
from oauthkit.core.version import __version__
from oauthkit.domains.oauth1.client import OAuthClient
from oauthkit.domains.oauth1.exceptions import (
    InvalidExchangeState,
    MalformedResponse,
    MissingVerifier,
    ProtocolViolation,
    TransportError,
)
from oauthkit.domains.oauth1.exchange import (
    TokenExchange,
    build_authorization_url,
    parse_token_response,
)
from oauthkit.domains.oauth1.fakes import FakeOAuth1Provider
from oauthkit.domains.oauth1.types import ExchangeState, Token

REQUEST_TOKEN_PATH = "/oauth/request_token"
ACCESS_TOKEN_PATH = "/oauth/access_token"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(transport: httpx.AsyncBaseTransport) -> OAuthClient:
    return OAuthClient("ck", "cs", "https://provider.com", transport=transport)


def _canned(status_code: int, body: str) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status_code, text=body))


def _exchange(transport: httpx.AsyncBaseTransport) -> TokenExchange:
    return _client(transport).exchange(logger.with_context(request_id="test-oauth1"))


# ===========================================================================
# request_token (table-driven)
# ===========================================================================


@dataclass
class RequestTokenCase:
    desc: str
    response_status: int
    response_body: str
    expect_error: Optional[Type[Exception]] = None
    expect_token: Optional[str] = None
    expect_secret: Optional[str] = None
    expect_extra: dict = field(default_factory=dict)


REQUEST_TOKEN_CASES = [
    RequestTokenCase(
        "happy path - callback confirmed",
        200,
        "oauth_token=req_tok&oauth_token_secret=req_sec&oauth_callback_confirmed=true",
        expect_token="req_tok",
        expect_secret="req_sec",
        expect_extra={"oauth_callback_confirmed": "true"},
    ),
    RequestTokenCase(
        "trailing separator and newline tolerated",
        200,
        "oauth_token=req_tok&oauth_token_secret=req_sec&oauth_callback_confirmed=true&\n",
        expect_token="req_tok",
        expect_secret="req_sec",
        expect_extra={"oauth_callback_confirmed": "true"},
    ),
    RequestTokenCase(
        "confirmation missing",
        200,
        "oauth_token=req_tok&oauth_token_secret=req_sec",
        expect_error=ProtocolViolation,
    ),
    RequestTokenCase(
        "confirmation false",
        200,
        "oauth_token=req_tok&oauth_token_secret=req_sec&oauth_callback_confirmed=false",
        expect_error=ProtocolViolation,
    ),
    RequestTokenCase(
        "200 but missing oauth_token",
        200,
        "oauth_token_secret=req_sec&oauth_callback_confirmed=true",
        expect_error=MalformedResponse,
    ),
    RequestTokenCase("200 but not form data", 200, "<html>oops</html>", MalformedResponse),
    RequestTokenCase("401 unauthorized", 401, "oauth_problem=signature_invalid", ProtocolViolation),
    RequestTokenCase("500 server error", 500, "Internal Server Error", ProtocolViolation),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("case", REQUEST_TOKEN_CASES, ids=lambda c: c.desc)
async def test_request_token(case: RequestTokenCase):
    exchange = _exchange(_canned(case.response_status, case.response_body))

    if case.expect_error is None:
        token = await exchange.request_token(REQUEST_TOKEN_PATH)
        assert token.token == case.expect_token
        assert token.secret == case.expect_secret
        assert token.verifier is None
        assert token.extra == case.expect_extra
        assert exchange.state is ExchangeState.REQUEST_TOKEN_RECEIVED
    else:
        with pytest.raises(case.expect_error) as exc_info:
            await exchange.request_token(REQUEST_TOKEN_PATH)
        assert exc_info.value.body == case.response_body
        assert exchange.state is ExchangeState.FAILED


@pytest.mark.asyncio
async def test_request_token_non_200_carries_status(fake_provider: FakeOAuth1Provider):
    fake_provider.force_response(403, "nope")
    exchange = _exchange(fake_provider.transport)
    with pytest.raises(ProtocolViolation) as exc_info:
        await exchange.request_token(REQUEST_TOKEN_PATH)
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_request_token_defaults_to_oob(fake_provider: FakeOAuth1Provider):
    token = await _client(fake_provider.transport).request_token(REQUEST_TOKEN_PATH)

    assert token.secret
    assert fake_provider.received_params[-1]["oauth_callback"] == "oob"
    assert "oauth_token" not in fake_provider.received_params[-1]


@pytest.mark.asyncio
async def test_request_token_sends_signed_post(fake_provider: FakeOAuth1Provider):
    await _client(fake_provider.transport).request_token(
        REQUEST_TOKEN_PATH, "https://app.com/callback"
    )

    request = fake_provider.requests[-1]
    assert request.method == "POST"
    assert str(request.url) == "https://provider.com/oauth/request_token"
    assert request.headers["Authorization"].startswith("OAuth ")
    assert request.headers["Content-Length"] == "0"
    assert request.headers["User-Agent"] == f"oauthkit/{__version__}"
    assert fake_provider.received_params[-1]["oauth_callback"] == "https://app.com/callback"


@pytest.mark.asyncio
async def test_request_token_unconfirmed_by_provider():
    provider = FakeOAuth1Provider({"ck": "cs"}, confirm_callback=False)
    with pytest.raises(ProtocolViolation):
        await _client(provider.transport).request_token(REQUEST_TOKEN_PATH)


@pytest.mark.asyncio
async def test_request_token_transport_error(fake_provider: FakeOAuth1Provider):
    fake_provider.set_error(httpx.ConnectError("connection refused"))
    exchange = _exchange(fake_provider.transport)

    with pytest.raises(TransportError) as exc_info:
        await exchange.request_token(REQUEST_TOKEN_PATH)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert exchange.state is ExchangeState.FAILED


@pytest.mark.asyncio
async def test_request_token_rejected_signature():
    provider = FakeOAuth1Provider({"ck": "different-secret"})
    with pytest.raises(ProtocolViolation) as exc_info:
        await _client(provider.transport).request_token(REQUEST_TOKEN_PATH)
    assert exc_info.value.status_code == 401
    assert "signature_invalid" in exc_info.value.body


# ===========================================================================
# access_token
# ===========================================================================


@dataclass
class AccessTokenCase:
    desc: str
    response_status: int
    response_body: str
    expect_error: Optional[Type[Exception]] = None
    transport_error: Optional[Exception] = None


ACCESS_TOKEN_CASES = [
    AccessTokenCase(
        "happy path", 200, "oauth_token=access_tok&oauth_token_secret=access_sec&user_id=123"
    ),
    AccessTokenCase(
        "trailing separator and newline tolerated",
        200,
        "oauth_token=access_tok&oauth_token_secret=access_sec&user_id=123&\n",
    ),
    AccessTokenCase("200 but missing tokens", 200, "user_id=123", MalformedResponse),
    AccessTokenCase("200 but not form data", 200, "<html>oops</html>", MalformedResponse),
    AccessTokenCase("403 forbidden", 403, "Forbidden", ProtocolViolation),
    AccessTokenCase("502 bad gateway", 502, "Bad Gateway", ProtocolViolation),
    AccessTokenCase(
        "connection refused",
        0,
        "",
        TransportError,
        transport_error=httpx.ConnectError("connection refused"),
    ),
]


def _access_transport(case: AccessTokenCase) -> httpx.MockTransport:
    if case.transport_error is None:
        return _canned(case.response_status, case.response_body)

    def fail(request: httpx.Request) -> httpx.Response:
        raise case.transport_error

    return httpx.MockTransport(fail)


@pytest.mark.asyncio
@pytest.mark.parametrize("case", ACCESS_TOKEN_CASES, ids=lambda c: c.desc)
async def test_access_token(case: AccessTokenCase):
    exchange = _exchange(_access_transport(case))
    request_token = Token("req_tok", "req_sec", verifier="verifier123")

    if case.expect_error is None:
        access = await exchange.access_token(ACCESS_TOKEN_PATH, request_token)
        assert access == Token("access_tok", "access_sec")
        assert access.verifier is None
        assert access.extra == {"user_id": "123"}
        assert exchange.state is ExchangeState.ACCESS_TOKEN_RECEIVED
    else:
        with pytest.raises(case.expect_error) as exc_info:
            await exchange.access_token(ACCESS_TOKEN_PATH, request_token)
        assert exchange.state is ExchangeState.FAILED
        if case.transport_error is not None:
            assert isinstance(exc_info.value.__cause__, type(case.transport_error))
        else:
            assert exc_info.value.body == case.response_body


@pytest.mark.asyncio
async def test_access_token_without_verifier_rejected(fake_provider: FakeOAuth1Provider):
    exchange = _exchange(fake_provider.transport)

    with pytest.raises(MissingVerifier):
        await exchange.access_token(ACCESS_TOKEN_PATH, Token("req_tok", "req_sec"))

    assert fake_provider.requests == []
    assert exchange.state is ExchangeState.INIT


@pytest.mark.asyncio
async def test_full_handshake(fake_provider: FakeOAuth1Provider):
    exchange = _exchange(fake_provider.transport)

    request_token = await exchange.request_token(REQUEST_TOKEN_PATH, "https://app.com/cb")
    verifier = fake_provider.authorize(request_token.token)
    authorized = Token.from_callback(
        request_token, {"oauth_token": request_token.token, "oauth_verifier": verifier}
    )
    access = await exchange.access_token(ACCESS_TOKEN_PATH, authorized)

    assert exchange.state is ExchangeState.ACCESS_TOKEN_RECEIVED
    assert access.token != request_token.token
    assert access.secret
    assert access.extra == {"user_id": "42"}
    sent = fake_provider.received_params[-1]
    assert sent["oauth_token"] == request_token.token
    assert sent["oauth_verifier"] == verifier


@pytest.mark.asyncio
async def test_access_token_wrong_verifier(fake_provider: FakeOAuth1Provider):
    client = _client(fake_provider.transport)
    request_token = await client.request_token(REQUEST_TOKEN_PATH)
    fake_provider.authorize(request_token.token)

    with pytest.raises(ProtocolViolation) as exc_info:
        await client.access_token(ACCESS_TOKEN_PATH, request_token.with_verifier("guess"))
    assert "verifier_invalid" in exc_info.value.body


# ===========================================================================
# State machine
# ===========================================================================


@pytest.mark.asyncio
async def test_request_token_only_once(fake_provider: FakeOAuth1Provider):
    exchange = _exchange(fake_provider.transport)
    await exchange.request_token(REQUEST_TOKEN_PATH)

    with pytest.raises(InvalidExchangeState):
        await exchange.request_token(REQUEST_TOKEN_PATH)
    assert exchange.state is ExchangeState.REQUEST_TOKEN_RECEIVED


@pytest.mark.asyncio
async def test_failed_exchange_is_terminal():
    exchange = _exchange(_canned(500, "boom"))
    with pytest.raises(ProtocolViolation):
        await exchange.request_token(REQUEST_TOKEN_PATH)

    assert exchange.state.is_terminal
    with pytest.raises(InvalidExchangeState):
        await exchange.access_token(ACCESS_TOKEN_PATH, Token("t", "s", "v"))


def test_new_exchange_starts_in_init(fake_provider: FakeOAuth1Provider):
    exchange = _exchange(fake_provider.transport)
    assert exchange.state is ExchangeState.INIT
    assert not exchange.state.is_terminal


# ===========================================================================
# parse_token_response
# ===========================================================================


def test_parse_token_response_keeps_blank_values():
    token = parse_token_response(
        httpx.Response(200, text="oauth_token=t&oauth_token_secret=&screen_name=")
    )
    assert token.secret == ""
    assert token.extra == {"screen_name": ""}


def test_parse_token_response_tolerates_trailing_separator_and_newline():
    token = parse_token_response(
        httpx.Response(
            200, text="oauth_token=t&oauth_token_secret=s&oauth_callback_confirmed=true&\n"
        )
    )
    assert token == Token("t", "s")
    assert token.extra == {"oauth_callback_confirmed": "true"}


# ===========================================================================
# build_authorization_url (table-driven)
# ===========================================================================


@dataclass
class AuthUrlCase:
    desc: str
    authorization_url: str
    params: dict
    expected: str


AUTH_URL_CASES = [
    AuthUrlCase(
        "token only",
        "https://provider.com/oauth/authorize",
        {},
        "https://provider.com/oauth/authorize?oauth_token=tok123",
    ),
    AuthUrlCase(
        "extra params appended",
        "https://provider.com/oauth/authorize",
        {"name": "My App", "scope": "read,write"},
        "https://provider.com/oauth/authorize?oauth_token=tok123&name=My+App&scope=read%2Cwrite",
    ),
    AuthUrlCase(
        "existing query preserved",
        "https://provider.com/authorize?force_login=true",
        {},
        "https://provider.com/authorize?force_login=true&oauth_token=tok123",
    ),
    AuthUrlCase(
        "empty optional params skipped",
        "https://provider.com/authorize",
        {"expiration": ""},
        "https://provider.com/authorize?oauth_token=tok123",
    ),
]


@pytest.mark.parametrize("case", AUTH_URL_CASES, ids=lambda c: c.desc)
def test_build_authorization_url(case: AuthUrlCase):
    url = build_authorization_url(case.authorization_url, Token("tok123", "sec"), **case.params)
    assert url == case.expected


# ===========================================================================
# Token.from_callback
# ===========================================================================


def test_from_callback_attaches_verifier():
    token = Token.from_callback(
        Token("tok", "sec"), {"oauth_token": "tok", "oauth_verifier": "ver"}
    )
    assert token == Token("tok", "sec", "ver")


def test_with_verifier_copies_extra():
    original = Token("tok", "sec", extra={"user_id": "1"})
    authorized = original.with_verifier("ver")
    authorized.extra["user_id"] = "2"

    assert authorized.verifier == "ver"
    assert authorized.extra is not original.extra
    assert original.extra == {"user_id": "1"}


@pytest.mark.parametrize(
    "query",
    [
        {"oauth_token": "other", "oauth_verifier": "ver"},
        {"oauth_token": "tok"},
    ],
    ids=["token mismatch", "verifier missing"],
)
def test_from_callback_rejects_bad_redirect(query):
    with pytest.raises(ProtocolViolation):
        Token.from_callback(Token("tok", "sec"), query)
