"""Fake implementations for OAuth1 domain testing."""

from oauthkit.domains.oauth1.fakes.clock import FixedClock, SequenceNonce, SteppingClock
from oauthkit.domains.oauth1.fakes.provider import FakeOAuth1Provider

__all__ = ["FakeOAuth1Provider", "FixedClock", "SequenceNonce", "SteppingClock"]
