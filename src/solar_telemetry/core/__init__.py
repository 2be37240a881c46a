"""
Core utilities for solar telemetry processing.

Provides configuration management, logging, date/time normalization and row field resolution.
"""

from .config import Config
from .logger import setup_logger, LoggerContext
from . import constants
from .date_utils import DateUtils, DateDialect
from .fields import FieldResolver, coerce_number, ensure_rows, is_blank, normalize_key

__all__ = [
    "Config",
    "setup_logger",
    "LoggerContext",
    "constants",
    "DateUtils",
    "DateDialect",
    "FieldResolver",
    "coerce_number",
    "ensure_rows",
    "is_blank",
    "normalize_key",
]
