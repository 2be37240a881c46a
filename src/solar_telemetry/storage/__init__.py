"""
Persistence layer for solar telemetry.

Provides key-value stores with upsert semantics keyed on (date, time).
"""

from .memory import InMemoryStore, InMemoryWeatherStore, InMemoryMeterStore

__all__ = [
    "InMemoryStore",
    "InMemoryWeatherStore",
    "InMemoryMeterStore",
]
