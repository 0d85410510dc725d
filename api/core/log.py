"""
Process-wide logging setup.
"""

from __future__ import annotations

import logging

from . import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    level = getattr(logging, settings.log_level(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_LOG_FORMAT)
    root.setLevel(level)
