"""Settings for oauthkit.

Uses Pydantic Settings for automatic env var loading. Consumer credentials are
never read from here: the embedding application passes them to OAuthClient.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oauthkit.core.version import __version__


class Settings(BaseSettings):
    """Process-wide defaults.

    Env vars use the ``OAUTHKIT_`` prefix:
        OAUTHKIT_LOG_LEVEL=DEBUG
        OAUTHKIT_HTTP_TIMEOUT_SECONDS=10
    """

    model_config = SettingsConfigDict(
        env_prefix="OAUTHKIT_",
        extra="ignore",
    )

    LOG_LEVEL: str = Field("INFO", description="Level for the oauthkit logger")
    HTTP_TIMEOUT_SECONDS: float = Field(
        30.0, gt=0, description="Timeout applied to every provider round trip"
    )
    DEFAULT_CALLBACK: str = Field(
        "oob", description="Callback sent with request-token calls when none is given"
    )
    USER_AGENT: str = Field(
        f"oauthkit/{__version__}", description="User-Agent header for outgoing requests"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
