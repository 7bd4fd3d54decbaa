"""Logging setup shared by the API, the Celery worker and scripts."""
from __future__ import annotations

import logging
import sys

from .config import get_settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once, using the level from settings by default."""

    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    # httpx logs every request at INFO; deliveries are already logged here
    logging.getLogger("httpx").setLevel(logging.WARNING)
