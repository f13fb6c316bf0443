"""Logging configuration for the application."""

import logging
import sys

from touristreview.core.config import get_settings

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout. httpx request logging is kept at WARNING so that
    per-lookup fan-out traffic does not flood INFO logs.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
