"""
Utility modules for the lifecycle engine.
"""

from .formatting import format_currency, format_percent
from .config import Config
from .logging_config import configure_logging

__all__ = ["format_currency", "format_percent", "Config", "configure_logging"]
