"""Logging configuration helpers for the candidate portal."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(verbose: bool = False) -> Logger:
    """Configure basic logging for the application and return the portal logger."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("quiz_portal")
