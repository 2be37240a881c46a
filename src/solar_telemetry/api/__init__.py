"""
HTTP layer for the telemetry backend services.

Provides the base API client, the remote weather store and the daily
generation client.
"""

from .client import APIClient
from .weather import WeatherStoreAPI
from .generation import DailyGenerationAPI

__all__ = [
    "APIClient",
    "WeatherStoreAPI",
    "DailyGenerationAPI",
]
