"""Logging configuration for pointerzone."""
import logging
import os
from typing import Optional

from ..utils.config import SETTINGS

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request / per-connection chatter, only shown at DEBUG
NOISY_LOGGERS = ("aiohttp.access", "urllib3.connectionpool")


def setup_logger(level_name: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger once and return the pointerzone logger.

    Level comes from the argument, then SETTINGS.log_level, then
    POINTERZONE_LOGLEVEL (default INFO).
    """
    name = level_name or SETTINGS.log_level or os.environ.get("POINTERZONE_LOGLEVEL", "INFO")
    level = getattr(logging, name.upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    app_logger = logging.getLogger("pointerzone")
    app_logger.setLevel(level)
    return app_logger
