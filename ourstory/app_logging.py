"""Logging configuration helpers."""

import logging

from textual.logging import TextualHandler


def configure_logging(level: int = logging.INFO) -> None:
    """Route the ``ourstory`` logger to Textual's console, once."""
    logger = logging.getLogger("ourstory")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = TextualHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
