"""Logging configuration and utilities."""

import logging
import sys

from docsign.config import settings

# Third-party loggers that log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "PIL")


def setup_logger(name: str | None = None) -> logging.Logger:
    """Set up and return a configured logger."""
    logger = logging.getLogger(name or __name__)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            f"%(asctime)s - {settings.app_name} - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def quiet_library_loggers(debug: bool | None = None) -> None:
    """Raise HTTP and imaging library loggers to WARNING outside debug mode.

    Every backend call would otherwise be echoed by httpx, including the
    request URL with the document id.
    """
    debug = settings.debug if debug is None else debug
    level = logging.DEBUG if debug else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(component: str) -> logging.Logger:
    """Child of the package logger, e.g. ``docsign.store``."""
    return logger.getChild(component)


# Default logger instance
logger = setup_logger("docsign")
quiet_library_loggers()
