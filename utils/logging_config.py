"""
Logging setup for the entry points.
"""

import logging
from typing import Optional

from .config import Config


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: Optional[Config] = None) -> None:
    """
    Configure the root logger from Config.log_level.

    Unknown level names fall back to INFO.
    """
    config = config or Config.load()
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
