"""Logging for oauthkit.

``logger`` is the module-wide default. Services accept an optional
``ContextualLogger`` so callers can bind request-scoped fields:

    log = logger.with_context(provider="twitter", step="request_token")
    log.info("Requesting temporary credentials")

No output is produced until the application configures logging, either its
own way or by calling ``configure_logging()``.
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple

from oauthkit.core.config import settings

LOGGER_NAME = "oauthkit"


class ContextualLogger(logging.LoggerAdapter):
    """LoggerAdapter that carries bound key/value context."""

    def with_context(self, **kwargs: Any) -> "ContextualLogger":
        """Return a new logger with ``kwargs`` merged into the bound context."""
        return ContextualLogger(self.logger, {**(self.extra or {}), **kwargs})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Attach bound context to the record and render it after the message."""
        context = dict(self.extra or {})
        kwargs["extra"] = {**context, **kwargs.get("extra", {})}
        if context:
            rendered = " ".join(f"{k}={v}" for k, v in context.items())
            msg = f"{msg} [{rendered}]"
        return msg, kwargs


_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_base = logging.getLogger(LOGGER_NAME)
_base.addHandler(logging.NullHandler())

logger = ContextualLogger(_base, {})


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Send oauthkit records to stderr at ``level`` (default: ``settings.LOG_LEVEL``).

    Meant for applications and scripts; importing oauthkit never installs a
    handler beyond the NullHandler. Safe to call more than once.
    """
    _base.setLevel((level or settings.LOG_LEVEL).upper())
    if not any(type(h) is logging.StreamHandler for h in _base.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        _base.addHandler(handler)
    return _base
