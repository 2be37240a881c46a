"""
Calculation algorithms for solar telemetry.

Provides the irradiance-threshold plant operating window calculation.
"""

from .plant_operation import PlantOperationCalculator, PlantOperation

__all__ = [
    "PlantOperationCalculator",
    "PlantOperation",
]
