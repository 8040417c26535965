"""
Logging utilities for consistent logging setup across the client.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_log_level(log_level: int | str, default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its number, falling back to default."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.strip().upper())
    return level if isinstance(level, int) else default


def setup_logger(
    logger: logging.Logger | str, log_level: int | str
) -> logging.Logger:
    """
    Attach a single StreamHandler to a logger and set its level.

    Args:
        logger: Logger instance or dotted logger name
        log_level: Numeric level or level name such as "DEBUG"

    Returns:
        The configured logger
    """
    if isinstance(logger, str):
        logger = logging.getLogger(logger)
    log_level = resolve_log_level(log_level)

    logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def mask_secret(value: str, secret: str) -> str:
    """Replace every occurrence of a secret in a log line."""
    if not secret:
        return value
    return value.replace(secret, "***")
