"""
Meter data models.

Contains DTOs for daily meter records and their per-meter reading pairs.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from ..core import constants


@dataclass
class MeterReadingPair:
    """Initial/final register reading of one meter for one transaction type."""

    meter_id: str
    kind: str  # "Export" or "Import"
    initial: float
    final: float

    @property
    def total(self) -> float:
        """Energy registered between the two readings."""
        return self.final - self.initial

    @property
    def is_gss(self) -> bool:
        """Whether the meter sits at the grid substation."""
        return constants.GSS_TOKEN in self.meter_id.lower()

    @property
    def label(self) -> str:
        """Column name under which the total is written."""
        return f"{self.kind} Total {self.meter_id}".strip()


@dataclass
class MeterRecord:
    """Daily meter record as persisted."""

    date: str  # DD-MM-YYYY
    time: str = constants.DEFAULT_TIME
    plant_start_time: str = constants.DEFAULT_TIME
    plant_stop_time: str = constants.DEFAULT_TIME
    total_operating_time: str = constants.DEFAULT_TIME
    active_energy_import: float = 0.0
    active_energy_export: float = 0.0
    reactive_energy_import: float = 0.0
    reactive_energy_export: float = 0.0
    voltage: float = 0.0
    current: float = 0.0
    frequency: float = 0.0
    power_factor: float = 0.0
    readings: Dict[str, Dict[str, float]] = field(default_factory=dict)
    site_name: Optional[str] = None
    status: str = constants.STATUS_DRAFT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self):
        """Natural key of the record."""
        return (self.date, self.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)
