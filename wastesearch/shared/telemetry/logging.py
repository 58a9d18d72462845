"""Logging configuration for the service."""

import logging
import sys

from wastesearch.core.config import get_settings

# Chatty third-party loggers kept at WARNING unless debugging.
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def setup_logging() -> None:
    """Configure service-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if not settings.debug:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
