"""Shared exceptions module."""

from typing import Optional


class OAuthKitException(Exception):
    """Base exception for oauthkit."""

    pass


class InvalidStateError(OAuthKitException):
    """Exception raised when an operation is attempted from an invalid state."""

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)
