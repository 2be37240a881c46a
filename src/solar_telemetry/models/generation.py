"""
Daily generation data models.

Contains the per-day totals pushed to the daily generation service and
returned by exports.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..core import constants


@dataclass
class DailyGeneration:
    """Energy exported by a site on one calendar day."""

    date: str  # DD-MM-YYYY
    site_name: str
    total_export: float  # kWh
    record_count: int
    plant_start_time: str = constants.DEFAULT_TIME
    plant_stop_time: str = constants.DEFAULT_TIME
    total_operating_time: str = constants.DEFAULT_TIME

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "siteName": self.site_name,
            "dailyGeneration": self.total_export,
            "plantStartTime": self.plant_start_time,
            "plantStopTime": self.plant_stop_time,
            "totalOperationTime": self.total_operating_time,
            "recordCount": self.record_count,
        }
