"""Logging configuration for the CV chat backend."""

import logging
import sys
from typing import Optional, Union


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        logger.propagate = False
    if level is not None:
        logger.setLevel(level)
    return logger


def configure_logging(level: Union[int, str]) -> None:
    """Apply the configured level to every logger of the package."""
    get_logger("cvchat", level)
