"""
Logging setup for session-auth.

Library modules only create loggers; applications call setup_logging()
once if they want the package's records on stderr.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "session_auth"
LOG_FORMAT = "[SESSION_AUTH] %(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Calling it again only updates the level.

    Args:
        level: Level name (defaults to Settings.log_level)

    Returns:
        The configured package logger
    """
    if level is None:
        from session_auth.config import get_settings
        level = get_settings().log_level

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_session_auth", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._session_auth = True
        logger.addHandler(handler)

    return logger
