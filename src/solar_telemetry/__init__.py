"""
Solar Plant Telemetry Processing

This package validates weather and meter spreadsheet uploads, correlates meter
days with weather samples to derive plant operating times, and computes
per-meter and grid-substation energy totals.
"""

__version__ = "0.1.0"
__description__ = "Solar plant telemetry validation and correlation engine"


def __getattr__(name):
    """Lazy import to avoid importing dependencies when not needed."""
    if name == "SolarTelemetryApp":
        from .main import SolarTelemetryApp
        return SolarTelemetryApp
    if name == "BatchPipeline":
        from .services import BatchPipeline
        return BatchPipeline
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "SolarTelemetryApp",
    "BatchPipeline",
]
