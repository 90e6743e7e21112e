"""
logger.py

Responsibility: Configures the root stdlib logger from the APP_ENV setting.
Does NOT: decide what gets logged; modules log through logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "🌐 %(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Name of the stderr handler installed by configure_logging.
HANDLER_NAME = "whatsmyip"

# Above CRITICAL, so nothing is emitted.
DISABLED = logging.CRITICAL + 1

_ENV_LEVELS = {
    "local": logging.DEBUG,
    "dev": logging.DEBUG,
    "development": logging.DEBUG,
    "test": logging.INFO,
    "staging": logging.INFO,
    "prod": DISABLED,
    "production": DISABLED,
}


def level_for_env(app_env: str | None) -> int:
    """
    Maps an APP_ENV value to a logging level.

    Unset means INFO; unknown values disable logging like production does.

    Args:
        app_env: The raw APP_ENV value, or None when unset.

    Returns:
        A stdlib logging level.
    """
    if app_env is None:
        return logging.INFO
    return _ENV_LEVELS.get(app_env.strip().lower(), DISABLED)


def configure_logging(app_env: str | None) -> logging.Logger:
    """
    Installs a single stderr handler on the root logger.

    Safe to call more than once: the handler installed by a previous call is
    replaced rather than duplicated.

    Args:
        app_env: The raw APP_ENV value, or None when unset.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)
    root.setLevel(level_for_env(app_env))
    return root
