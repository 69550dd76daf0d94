"""Logging utilities for lmms_docs commands."""

from __future__ import annotations

import logging

_LOGGER_NAME = "lmms_docs"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the lmms_docs hierarchy."""
    if not name or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith(f"{_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Configure the package logger with a single console handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(
        logging.Formatter("[lmms-docs] %(levelname)s %(message)s")
    )
    logger.addHandler(stream_handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
