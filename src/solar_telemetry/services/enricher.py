"""
Meter row enrichment service.

Attaches the derived columns to a meter row: plant start/stop/total from the
day's weather samples, per-meter pair totals, GSS totals and net export.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from ..algorithms import PlantOperationCalculator, PlantOperation
from ..core import constants
from ..processing import MeterAggregator, MeterTotals


class MeterEnricher:
    """Merge derived operating and energy fields onto meter rows."""

    def __init__(
        self,
        calculator: Optional[PlantOperationCalculator] = None,
        aggregator: Optional[MeterAggregator] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize meter enricher.

        Args:
            calculator: Plant operation calculator
            aggregator: Meter reading aggregator
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.calculator = calculator or PlantOperationCalculator(logger=logger)
        self.aggregator = aggregator or MeterAggregator(logger)

    def derive(self, row: Mapping[str, Any], samples: Iterable[Any]) -> Dict[str, Any]:
        """
        Compute the derived fields of a meter row without modifying it.

        Args:
            row: Meter row
            samples: The row date's weather samples (may be empty)

        Returns:
            Dictionary of derived column -> value
        """
        operation: PlantOperation = self.calculator.calculate(samples)
        totals: MeterTotals = self.aggregator.calculate_totals(row)

        derived: Dict[str, Any] = {
            constants.PLANT_START_FIELD: operation.start_time,
            constants.PLANT_STOP_FIELD: operation.stop_time,
            constants.OPERATING_TOTAL_FIELD: operation.total_operating_time,
        }
        derived.update(totals.to_fields())
        return derived

    def enrich(self, row: Mapping[str, Any], samples: Iterable[Any]) -> Dict[str, Any]:
        """
        Get a copy of the row with derived fields merged in.

        Derived fields overwrite any same-named columns already on the row.

        Args:
            row: Meter row
            samples: The row date's weather samples (may be empty)

        Returns:
            Enriched row
        """
        enriched = dict(row)
        enriched.update(self.derive(row, samples))
        return enriched
