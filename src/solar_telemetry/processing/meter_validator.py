"""
Meter row validation module.

Meter sheets carry one row per date. Reading columns are discovered
dynamically: any column whose name mentions export or import is a reading.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..core.date_utils import DateUtils, DateDialect
from ..core.fields import coerce_number, is_blank
from .aggregator import is_derived_field

_DDMMYYYY_RE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
_READING_KEY_RE = re.compile(r"export|import", re.IGNORECASE)


def is_valid_ddmmyyyy(value: str) -> bool:
    """Check for DD-MM-YYYY with day 01-31 and month 01-12."""
    match = _DDMMYYYY_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return False
    return 1 <= int(match.group(1)) <= 31 and 1 <= int(match.group(2)) <= 12


def reading_keys(row: Mapping[str, Any]) -> List[str]:
    """Get the reading columns of a row, ignoring enricher output."""
    return [k for k in row.keys() if _READING_KEY_RE.search(k) and not is_derived_field(k)]


class MeterValidator:
    """Validate meter rows."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize meter validator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def normalize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
        """Rewrite Date and the manual Start/Stop times into canonical form."""
        normalized = dict(row)

        if not is_blank(row.get("Date")):
            normalized["Date"] = DateUtils.normalize_date(row["Date"], DateDialect.METER)

        for key in ("Start Time", "Stop Time"):
            if not is_blank(row.get(key)):
                normalized[key] = DateUtils.normalize_time(row[key])

        return normalized

    def validate_row(self, row: Mapping[str, Any], seen_dates: Set[str]) -> Tuple[Dict[str, Any], List[str]]:
        """
        Validate a single canonical meter row.

        Args:
            row: Meter row with canonical keys
            seen_dates: Dates already seen in this batch; updated in place

        Returns:
            Tuple of (normalized_row, list_of_errors)
        """
        normalized = self.normalize_row(row)
        errors: List[str] = []

        date = "" if is_blank(normalized.get("Date")) else str(normalized["Date"])
        if not is_valid_ddmmyyyy(date):
            errors.append("Date must be in format DD-MM-YYYY (e.g., 01-12-2024)")
        else:
            if date in seen_dates:
                errors.append("No duplicate dates allowed")
            seen_dates.add(date)

        start_time = normalized.get("Start Time")
        stop_time = normalized.get("Stop Time")

        if not is_blank(start_time) and not DateUtils.is_valid_time(start_time):
            errors.append("Start Time must be HH:MM (24-hour)")
        if not is_blank(stop_time) and not DateUtils.is_valid_time(stop_time):
            errors.append("Stop Time must be HH:MM (24-hour)")

        has_start_stop = DateUtils.is_valid_time(start_time) and DateUtils.is_valid_time(stop_time)

        has_reading = False
        for key in reading_keys(normalized):
            try:
                value = coerce_number(normalized[key])
            except ValueError:
                errors.append(f"{key} must be numeric")
                continue

            if value is None:
                continue

            has_reading = True
            if value < 0:
                errors.append(f"{key} cannot be negative")

        if not has_start_stop and not has_reading:
            errors.append("Each date must have either Start/Stop times OR Export/Import readings")

        return normalized, errors
