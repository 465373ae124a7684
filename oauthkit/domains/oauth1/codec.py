"""OAuth parameter encoding.

OAuth escapes a broader set of characters than generic URL encoding: only
``A-Z a-z 0-9 - . _ ~`` pass through, so ``* ! ' ( )`` are escaped too.
"""

from typing import Any
from urllib.parse import quote

UNRESERVED = "-._~"


def percent_encode(value: Any) -> str:
    """Percent-encode ``value`` per RFC 5849 section 3.6."""
    if isinstance(value, bytes):
        return quote(value, safe=UNRESERVED)
    return quote(str(value).encode("utf-8"), safe=UNRESERVED)
