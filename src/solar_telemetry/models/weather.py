"""
Weather data models.

Contains the DTO for a single weather sensor sample.
"""

import math
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from ..core import constants
from ..core.fields import coerce_number, normalize_key

# Stored documents use camelCase, uploaded rows use the canonical
# spreadsheet names; both normalize to the same lookup keys.
_SAMPLE_KEYS = {
    "date": ("date",),
    "time": ("time",),
    "poa": ("poa", "poapyranometer", "poameter1"),
    "ghi": ("ghi", "ghipyranometer"),
    "albedo_up": ("albedoup",),
    "albedo_down": ("albedodown",),
    "module_temp": ("moduletemp", "moduletemperature"),
    "ambient_temp": ("ambienttemp", "ambienttemperature"),
    "wind_speed": ("windspeed",),
    "rainfall": ("rainfall",),
    "humidity": ("humidity",),
    "site_name": ("sitename", "site"),
    "status": ("status",),
}


def _lookup(values: Dict[str, Any], names) -> Any:
    for name in names:
        value = values.get(name)
        if value is not None and value != "":
            return value
    return None


def _lenient_number(value: Any) -> Optional[float]:
    """Coerce to float; malformed values become NaN so callers can discard them."""
    try:
        return coerce_number(value)
    except ValueError:
        return math.nan


@dataclass
class WeatherSample:
    """One weather station reading at a point in time."""

    date: str  # DD-MMM-YY
    time: str  # HH:MM
    poa: Optional[float] = None  # Plane-of-array irradiance (W/m²)
    ghi: Optional[float] = None  # Global horizontal irradiance (W/m²)
    albedo_up: Optional[float] = None  # W/m²
    albedo_down: Optional[float] = None  # W/m²
    module_temp: Optional[float] = None  # °C
    ambient_temp: Optional[float] = None  # °C
    wind_speed: Optional[float] = None
    rainfall: Optional[float] = None
    humidity: Optional[float] = None  # %
    site_name: Optional[str] = None
    status: str = constants.STATUS_DRAFT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self):
        """Natural key of the sample."""
        return (self.date, self.time)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WeatherSample":
        """
        Build a sample from a stored document or a canonical upload row.

        Numeric fields that cannot be parsed become NaN rather than raising;
        validation of uploaded rows happens before this point.

        Args:
            data: Mapping with weather fields

        Returns:
            WeatherSample instance
        """
        values = {normalize_key(k): v for k, v in data.items()}

        numbers = {
            attr: _lenient_number(_lookup(values, names))
            for attr, names in _SAMPLE_KEYS.items()
            if attr not in ("date", "time", "site_name", "status")
        }

        date_value = _lookup(values, _SAMPLE_KEYS["date"])
        time_value = _lookup(values, _SAMPLE_KEYS["time"])
        site_name = _lookup(values, _SAMPLE_KEYS["site_name"])

        return cls(
            date=str(date_value).strip() if date_value is not None else "",
            time=str(time_value).strip() if time_value is not None else "",
            site_name=str(site_name).strip() if site_name is not None else None,
            status=_lookup(values, _SAMPLE_KEYS["status"]) or constants.STATUS_DRAFT,
            **numbers,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)
