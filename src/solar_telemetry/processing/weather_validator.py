"""
Weather row validation module.

Validates uploaded weather rows against the sensor rules:

1) Date & Time
   - Date format: DD-MMM-YY (e.g., 01-Dec-24)
   - Time format: HH:MM (24-hour, e.g., 09:30)
   - No duplicate date+time combinations
2) POA / GHI / Albedo Up / Albedo Down (W/m²): 0-1500, zeros allowed
3) Module Temperature (°C): > 0 (cannot be 0), no negatives, <= 100
4) Ambient Temperature (°C): 0-100, zeros allowed
5) Wind Speed 0-200, Rainfall 0-500, Humidity 0-100, zeros allowed

Blank numeric cells are not validated.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..core import constants
from ..core.date_utils import DateUtils, DateDialect
from ..core.fields import coerce_number, ensure_rows, is_blank, weather_fields
from ..models import RowError, ValidationBatchResult

_DDMMMYY_RE = re.compile(r"^(\d{2})-([A-Za-z]{3})-(\d{2})$")
_MONTH_NAMES = {m.lower() for m in constants.MONTHS}


def is_valid_ddmmmyy(value: str) -> bool:
    """Check for DD-MMM-YY with day 01-31 and a known month abbreviation."""
    match = _DDMMMYY_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return False
    return 1 <= int(match.group(1)) <= 31 and match.group(2).lower() in _MONTH_NAMES


class WeatherValidator:
    """Validate weather rows."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize weather validator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _check_range(value: Any, label: str, minimum: float, maximum: float, errors: List[str]) -> None:
        try:
            number = coerce_number(value)
        except ValueError:
            errors.append(f"{label} must be a number")
            return

        if number is None:
            return

        if number < minimum or number > maximum:
            errors.append(f"{label} must be between {minimum} and {maximum}")

    @staticmethod
    def _check_module_temperature(value: Any, errors: List[str]) -> None:
        try:
            number = coerce_number(value)
        except ValueError:
            errors.append("Module Temperature must be a number")
            return

        if number is None:
            return

        if number == 0:
            errors.append("Module Temperature cannot be 0")
        elif number < 0:
            errors.append("Module Temperature cannot be negative")
        elif number > constants.MODULE_TEMP_MAX:
            errors.append(f"Module Temperature must be ≤ {constants.MODULE_TEMP_MAX}°C")

    def validate_row(
        self,
        row: Mapping[str, Any],
        seen_date_times: Set[Tuple[str, str]]
    ) -> Tuple[Dict[str, Any], List[str]]:
        """
        Validate a single canonical weather row.

        Args:
            row: Weather row with canonical keys
            seen_date_times: (date, time) pairs already seen in this batch;
                updated in place

        Returns:
            Tuple of (row with normalized Date/Time, list_of_errors)
        """
        errors: List[str] = []

        raw_date = row.get("Date")
        raw_time = row.get("Time")
        date = "" if is_blank(raw_date) else DateUtils.normalize_date(raw_date, DateDialect.WEATHER)
        time = "" if is_blank(raw_time) else DateUtils.normalize_time(raw_time)

        if not date:
            errors.append("Missing Date")
        elif not is_valid_ddmmmyy(date):
            errors.append("Invalid Date format (expected DD-MMM-YY, e.g., 01-Dec-24)")

        if not time:
            errors.append("Missing Time")
        elif not DateUtils.is_valid_time(time):
            errors.append("Invalid Time format (expected HH:MM 24-hour, e.g., 09:30)")

        if date and time and is_valid_ddmmmyy(date) and DateUtils.is_valid_time(time):
            key = (date.lower(), time)
            if key in seen_date_times:
                errors.append("Duplicate Date & Time combination")
            else:
                seen_date_times.add(key)

        for field_name, (label, minimum, maximum) in constants.WEATHER_RANGES.items():
            if field_name == "AmbientTemp":
                self._check_module_temperature(row.get("ModuleTemp"), errors)
            self._check_range(row.get(field_name), label, minimum, maximum, errors)

        normalized = dict(row)
        if date:
            normalized["Date"] = date
        if time:
            normalized["Time"] = time

        return normalized, errors

    def validate_rows(self, rows: Any) -> ValidationBatchResult:
        """
        Validate a batch of weather rows.

        Rows are canonicalized (column synonyms resolved) before the rules run.

        Args:
            rows: Sequence of row mappings

        Returns:
            ValidationBatchResult with normalized rows and per-row errors

        Raises:
            ValueError: If rows is not a sequence of mappings
        """
        ensure_rows(rows)

        seen: Set[Tuple[str, str]] = set()
        validated: List[Dict[str, Any]] = []
        errors: List[RowError] = []

        for index, row in enumerate(rows):
            normalized, row_errors = self.validate_row(weather_fields.canonicalize(row), seen)
            validated.append(normalized)
            if row_errors:
                errors.append(RowError(row_number=index + constants.ROW_NUMBER_OFFSET, errors=row_errors))

        self.logger.info(f"Validated {len(rows)} weather rows: {len(errors)} with errors")
        return ValidationBatchResult(rows=validated, errors=errors)
