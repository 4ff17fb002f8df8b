"""Logging setup for pipeline runs."""

import logging
import sys

from tracker_sla.utils.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "%H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
