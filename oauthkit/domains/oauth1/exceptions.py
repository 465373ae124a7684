"""OAuth1 domain exceptions.

Every network-path error carries the raw provider body for diagnostics.
"""

from typing import Optional

from oauthkit.core.exceptions import InvalidStateError, OAuthKitException


class UnsupportedAlgorithm(OAuthKitException):
    """Raised when a client is configured with a signature method other than HMAC-SHA1."""

    def __init__(self, signature_method: str) -> None:
        """Initialize with the rejected signature method."""
        self.signature_method = signature_method
        super().__init__(f"Signature method {signature_method!r} is not supported")


class TransportError(OAuthKitException):
    """Raised when the provider could not be reached. Safe for the caller to retry."""

    def __init__(self, url: str, message: str) -> None:
        """Initialize with the target URL and the underlying transport message."""
        self.url = url
        super().__init__(f"Transport failure reaching {url}: {message}")


class ProtocolViolation(OAuthKitException):
    """Raised when the provider answers in a way the OAuth flow does not allow."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        """Initialize with a message, the HTTP status and the raw response body."""
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class MalformedResponse(OAuthKitException):
    """Raised when a provider response cannot be read as the expected form data."""

    def __init__(self, message: str, *, body: Optional[str] = None) -> None:
        """Initialize with a message and the raw response body."""
        self.body = body
        super().__init__(message)


class MissingVerifier(OAuthKitException):
    """Raised when an access-token exchange is attempted without ``oauth_verifier``."""

    def __init__(self, message: str = "Token has no verifier; complete user authorization first"):
        """Initialize with a default message."""
        super().__init__(message)


class InvalidExchangeState(InvalidStateError):
    """Raised when a token exchange step is called from a state that does not allow it."""

    def __init__(self, operation: str, state: str) -> None:
        """Initialize with the attempted operation and the current state."""
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot call {operation} while exchange is in state {state}")
