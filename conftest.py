"""Root conftest for pytest configuration and shared fixtures.

Loaded before the colocated tests under oauthkit/, so its fixtures are
available to every test package.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables - must be set before any oauthkit module import
# Uses setdefault so real env vars are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("OAUTHKIT_LOG_LEVEL", "DEBUG")
os.environ.setdefault("OAUTHKIT_HTTP_TIMEOUT_SECONDS", "5")


@pytest.fixture
def fake_provider():
    """Fake OAuth1 provider with one registered consumer."""
    from oauthkit.domains.oauth1.fakes import FakeOAuth1Provider

    return FakeOAuth1Provider({"ck": "cs"})
