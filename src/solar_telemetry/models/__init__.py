"""
Data models for solar telemetry processing.

Contains DTOs for weather samples, meter records, validation results and
daily generation totals.
"""

from .weather import WeatherSample
from .meter import MeterRecord, MeterReadingPair
from .validation import RowError, ValidationBatchResult, SubmissionResult
from .generation import DailyGeneration

__all__ = [
    "WeatherSample",
    "MeterRecord",
    "MeterReadingPair",
    "RowError",
    "ValidationBatchResult",
    "SubmissionResult",
    "DailyGeneration",
]
