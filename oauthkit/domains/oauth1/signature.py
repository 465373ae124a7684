"""Signature base string construction and HMAC-SHA1 signing (RFC 5849 section 3.4)."""

import base64
import hashlib
import hmac
from typing import List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit, urlunsplit

import httpx

from oauthkit.domains.oauth1.codec import percent_encode
from oauthkit.domains.oauth1.exceptions import UnsupportedAlgorithm
from oauthkit.domains.oauth1.protocols import ConsumerProtocol
from oauthkit.domains.oauth1.types import HMAC_SHA1


def build_signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    """Build the signature base string.

    Format: METHOD&encode(URL)&encode(NORMALIZED_PARAMS)

    ``url`` is normalized the way httpx sends it, so characters such as
    spaces are escaped in the path before it is encoded again here.
    ``params`` must already be percent-encoded. Query parameters found on
    ``url`` are decoded and re-encoded; repeated names are all kept, but a
    name present in ``params`` replaces every query value of that name.
    Pairs are sorted by name, then by value.
    """
    scheme, netloc, path, query, _ = urlsplit(str(httpx.URL(url)))
    base_url = urlunsplit((scheme, netloc, path, "", ""))

    pairs: List[Tuple[str, str]] = [
        (percent_encode(k), percent_encode(v))
        for k, v in parse_qsl(query, keep_blank_values=True)
        if percent_encode(k) not in params
    ]
    pairs.extend(params.items())

    param_str = "&".join(f"{k}={v}" for k, v in sorted(pairs))

    parts = [
        percent_encode(method.upper()),
        percent_encode(base_url),
        percent_encode(param_str),
    ]
    return "&".join(parts)


def sign_hmac_sha1(base_string: str, consumer_secret: str, token_secret: str = "") -> str:
    """Sign the base string using HMAC-SHA1.

    Signing key: percent_encode(consumer_secret)&percent_encode(token_secret)
    """
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("utf-8")


def generate_signature(
    method: str,
    url: str,
    params: Mapping[str, str],
    consumer: ConsumerProtocol,
    token_secret: Optional[str] = None,
) -> str:
    """Compute the base64 ``oauth_signature`` for a request."""
    if consumer.signature_method != HMAC_SHA1:
        raise UnsupportedAlgorithm(consumer.signature_method)
    base_string = build_signature_base_string(method, url, params)
    return sign_hmac_sha1(base_string, consumer.consumer_secret, token_secret or "")
