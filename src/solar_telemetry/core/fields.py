"""
Field resolution for spreadsheet rows.

Spreadsheet exports name the same column in many ways ("Module Temperature",
"ModuleTemp", "module_temp"). Rows are canonicalized once at ingestion so the
validators and the enricher can work against fixed field names.
"""

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

_NON_ALNUM_RE = re.compile(r"[^0-9a-z]+")


def normalize_key(name: Any) -> str:
    """Lower-case a column name and drop everything but letters and digits."""
    return _NON_ALNUM_RE.sub("", str(name).lower())


def is_blank(value: Any) -> bool:
    """Check for an absent cell (None or whitespace-only string)."""
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_number(value: Any) -> Optional[float]:
    """
    Convert a cell value to a float.

    Args:
        value: Raw cell value

    Returns:
        The number, or None when the cell is blank

    Raises:
        ValueError: If the value is present but not a finite number
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise ValueError(f"Not a number: {value!r}")

    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return number


class FieldResolver:
    """
    Case-insensitive, synonym-aware mapping of row keys onto canonical names.

    Synonyms are tried in declaration order; the first one carrying a
    non-blank value wins. Keys that match no synonym are passed through
    untouched.
    """

    def __init__(self, synonyms: Mapping[str, List[str]]):
        """
        Initialize resolver.

        Args:
            synonyms: Canonical field name -> accepted column names
        """
        self.synonyms = synonyms
        self._lookup: Dict[str, Tuple[str, int]] = {}

        for canonical, names in synonyms.items():
            for priority, name in enumerate([canonical] + list(names)):
                self._lookup.setdefault(normalize_key(name), (canonical, priority))

    def resolve(self, key: Any) -> Optional[str]:
        """Get the canonical name for a column, or None if it is not a known field."""
        entry = self._lookup.get(normalize_key(key))
        return entry[0] if entry else None

    def canonicalize(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Rename known columns of a row to their canonical names.

        Args:
            row: Raw row mapping

        Returns:
            New row dictionary with canonical keys, preserving column order
        """
        result: Dict[str, Any] = {}
        chosen: Dict[str, int] = {}

        for key, value in row.items():
            entry = self._lookup.get(normalize_key(key))
            if entry is None:
                result[key] = value
                continue

            canonical, priority = entry
            if canonical not in chosen:
                result[canonical] = value
                chosen[canonical] = priority
                continue

            current = result[canonical]
            if is_blank(current) and not is_blank(value):
                replace = True
            elif is_blank(value):
                replace = False
            else:
                replace = priority < chosen[canonical]

            if replace:
                result[canonical] = value
                chosen[canonical] = priority

        return result


WEATHER_FIELDS: Dict[str, List[str]] = {
    "Date": [],
    "Time": [],
    "Site Name": ["SiteName", "Site"],
    "POA": ["POA Pyranometer", "POA Meter 1"],
    "GHI": ["GHI Pyranometer"],
    "AlbedoUp": ["Albedo (Up)"],
    "AlbedoDown": ["Albedo (Down)"],
    "ModuleTemp": ["Module Temperature", "Module Temp"],
    "AmbientTemp": ["Ambient Temperature", "Ambient Temp"],
    "WindSpeed": [],
    "Rainfall": [],
    "Humidity": [],
}

METER_FIELDS: Dict[str, List[str]] = {
    "Date": [],
    "Time": [],
    "Site Name": ["SiteName", "Site"],
    "Start Time": ["StartTime", "Start"],
    "Stop Time": ["StopTime", "Stop"],
    "ActiveEnergyImport": ["Active Energy Import"],
    "ActiveEnergyExport": ["Active Energy Export"],
    "ReactiveEnergyImport": ["Reactive Energy Import"],
    "ReactiveEnergyExport": ["Reactive Energy Export"],
    "Voltage": [],
    "Current": [],
    "Frequency": [],
    "PowerFactor": ["Power Factor", "PF"],
}

weather_fields = FieldResolver(WEATHER_FIELDS)
meter_fields = FieldResolver(METER_FIELDS)


def ensure_rows(rows: Any) -> None:
    """
    Check that a batch is a sequence of row mappings.

    Raises:
        ValueError: If rows is not a list/tuple of mappings
    """
    if not isinstance(rows, (list, tuple)):
        raise ValueError(f"Rows must be a sequence of mappings, got {type(rows).__name__}")

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise ValueError(f"Row at index {index} is not a mapping: {type(row).__name__}")
