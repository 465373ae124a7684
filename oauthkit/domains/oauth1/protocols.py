"""Protocols for OAuth1 domain dependencies."""

from typing import Protocol


class Clock(Protocol):
    """Source of ``oauth_timestamp`` values."""

    def __call__(self) -> int:
        """Return the current time in whole seconds since the epoch."""
        ...


class NonceSource(Protocol):
    """Source of ``oauth_nonce`` values."""

    def __call__(self) -> str:
        """Return a fresh, unpredictable nonce."""
        ...


class ConsumerProtocol(Protocol):
    """Consumer credentials needed to derive a signing key."""

    @property
    def consumer_key(self) -> str:
        """Key identifying the application to the provider."""
        ...

    @property
    def consumer_secret(self) -> str:
        """Secret shared with the provider."""
        ...

    @property
    def signature_method(self) -> str:
        """Declared signature method."""
        ...
