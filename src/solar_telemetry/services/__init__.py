"""
Business logic services for solar telemetry.

Services orchestrate validation, enrichment, submission and sync of upload
batches.
"""

from .weather_index import WeatherIndex
from .enricher import MeterEnricher
from .validation import WeatherValidationService, MeterValidationService
from .submission import WeatherSubmitter, MeterSubmitter
from .pipeline import BatchPipeline, BatchState, UploadBatch
from .sync import DailyGenerationSync

__all__ = [
    "WeatherIndex",
    "MeterEnricher",
    "WeatherValidationService",
    "MeterValidationService",
    "WeatherSubmitter",
    "MeterSubmitter",
    "BatchPipeline",
    "BatchState",
    "UploadBatch",
    "DailyGenerationSync",
]
