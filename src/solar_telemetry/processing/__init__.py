"""
Row processing module for solar telemetry.

Provides weather and meter row validation and meter reading aggregation.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..models import ValidationBatchResult
from .aggregator import (
    MeterAggregator,
    MeterTotals,
    DERIVED_FIELDS,
    is_derived_field,
    strip_derived_fields,
    parse_pair_column,
)
from .meter_validator import MeterValidator, is_valid_ddmmyyyy, reading_keys
from .weather_validator import WeatherValidator, is_valid_ddmmmyy


class RowProcessor:
    """
    Unified row processor combining validation and aggregation.

    This class provides a convenient interface to all row-level operations.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize row processor.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.weather_validator = WeatherValidator(logger)
        self.meter_validator = MeterValidator(logger)
        self.aggregator = MeterAggregator(logger)

    def validate_weather_rows(self, rows: Any) -> ValidationBatchResult:
        """
        Validate a batch of weather rows.

        Args:
            rows: Sequence of row mappings

        Returns:
            ValidationBatchResult
        """
        return self.weather_validator.validate_rows(rows)

    def validate_meter_row(
        self,
        row: Mapping[str, Any],
        seen_dates: Set[str]
    ) -> Tuple[Dict[str, Any], List[str]]:
        """
        Validate one canonical meter row.

        Args:
            row: Meter row with canonical keys
            seen_dates: Dates already seen in the batch

        Returns:
            Tuple of (normalized_row, list_of_errors)
        """
        return self.meter_validator.validate_row(row, seen_dates)

    def calculate_totals(self, row: Mapping[str, Any]) -> MeterTotals:
        """
        Calculate meter pair, GSS and net export totals for a row.

        Args:
            row: Meter row

        Returns:
            MeterTotals instance
        """
        return self.aggregator.calculate_totals(row)


__all__ = [
    "MeterAggregator",
    "MeterTotals",
    "MeterValidator",
    "WeatherValidator",
    "RowProcessor",
    "DERIVED_FIELDS",
    "is_derived_field",
    "strip_derived_fields",
    "parse_pair_column",
    "is_valid_ddmmyyyy",
    "is_valid_ddmmmyy",
    "reading_keys",
]
