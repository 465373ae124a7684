"""Sending signed requests over httpx."""

from typing import Mapping, Optional

import httpx

from oauthkit.core.config import settings
from oauthkit.core.logging import ContextualLogger
from oauthkit.domains.oauth1.exceptions import TransportError
from oauthkit.domains.oauth1.types import SignedRequest


async def send_signed(
    signed: SignedRequest,
    *,
    logger: ContextualLogger,
    data: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """Send a signed request and return the provider's response as-is.

    Raises:
        TransportError: If the provider could not be reached.
    """
    request_headers = {"User-Agent": settings.USER_AGENT, **(headers or {})}
    request_headers.update(signed.headers)
    # Some providers reject body-less requests without an explicit length.
    if not data and "Content-Length" not in request_headers:
        request_headers["Content-Length"] = "0"

    try:
        async with httpx.AsyncClient(
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS, transport=transport
        ) as client:
            return await client.request(
                signed.method,
                signed.url,
                headers=request_headers,
                data=dict(data) if data else None,
            )
    except httpx.TransportError as e:
        logger.error(f"Transport error on {signed.method} {signed.url}: {e!r}")
        raise TransportError(signed.url, str(e) or e.__class__.__name__) from e
