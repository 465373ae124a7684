"""Configuration module for oauthkit.

Usage:
    from oauthkit.core.config import settings

    timeout = settings.HTTP_TIMEOUT_SECONDS
"""

from oauthkit.core.config.settings import Settings

__all__ = [
    "Settings",
    "settings",
]

# Singleton settings instance
settings = Settings()
