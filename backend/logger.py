"""Logging configuration for the API process."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install one stdout handler on the root logger.

    Module loggers (logging.getLogger(__name__)) propagate here. Calling
    this again only updates the level.
    """
    root = logging.getLogger()
    log_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(log_level)
    if any(getattr(h, "_book_discovery", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._book_discovery = True
    root.addHandler(handler)
