"""
Logging setup - one call at application startup.

Every module logs through ``logging.getLogger(__name__)``; this only
configures the root handler and level from settings.
"""

import logging

from simplifyhr.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging() -> None:
    """Configure root logging once (level comes from LOG_LEVEL)."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # The OpenAI client logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
