"""
Batch validation services.

Weather batches are validated row by row. Meter batches are validated and
then enriched with derived fields computed from the weather store, which is
queried once per batch.
"""

import logging
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from ..algorithms import PlantOperationCalculator
from ..core import LoggerContext, constants
from ..core.fields import ensure_rows, meter_fields
from ..models import RowError, ValidationBatchResult
from ..processing import RowProcessor, is_valid_ddmmyyyy, strip_derived_fields
from .enricher import MeterEnricher
from .weather_index import WeatherIndex, WeatherStore

if TYPE_CHECKING:
    from ..core.config import Config


class WeatherValidationService:
    """Validate weather batches."""

    def __init__(self, processor: Optional[RowProcessor] = None, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.processor = processor or RowProcessor(logger)

    def validate(self, rows: Any) -> ValidationBatchResult:
        with LoggerContext(self.logger, "weather batch validation"):
            return self.processor.validate_weather_rows(rows)


class MeterValidationService:
    """Validate meter batches and attach the derived operating and energy fields."""

    def __init__(
        self,
        weather_store: WeatherStore,
        processor: Optional[RowProcessor] = None,
        enricher: Optional[MeterEnricher] = None,
        parallel_fetch: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize meter validation service.

        Args:
            weather_store: Store providing weather samples by date variants
            processor: Row processor (validation rules and aggregation)
            enricher: Meter enricher
            parallel_fetch: Fetch weather per date in parallel
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.weather_store = weather_store
        self.processor = processor or RowProcessor(logger)
        self.enricher = enricher or MeterEnricher(aggregator=self.processor.aggregator, logger=logger)
        self.parallel_fetch = parallel_fetch

    @classmethod
    def from_config(
        cls,
        config: "Config",
        weather_store: WeatherStore,
        logger: Optional[logging.Logger] = None
    ) -> "MeterValidationService":
        """
        Create a service with thresholds and fetch mode taken from configuration.

        Args:
            config: Application configuration
            weather_store: Weather store
            logger: Logger instance

        Returns:
            MeterValidationService instance
        """
        processor = RowProcessor(logger)
        calculator = PlantOperationCalculator(
            start_threshold=config.poa_start_threshold,
            stop_upper=config.poa_stop_upper,
            logger=logger,
        )
        enricher = MeterEnricher(calculator=calculator, aggregator=processor.aggregator, logger=logger)
        return cls(
            weather_store,
            processor=processor,
            enricher=enricher,
            parallel_fetch=config.parallel_weather_fetch,
            logger=logger,
        )

    def build_index(self, dates: Set[str]) -> WeatherIndex:
        """Prefetch the weather samples for a batch's dates."""
        return WeatherIndex(self.weather_store, parallel=self.parallel_fetch, logger=self.logger).build(dates)

    def validate(self, rows: Any) -> ValidationBatchResult:
        """
        Validate and enrich a batch of meter rows.

        Derived fields left over from an earlier validation are discarded and
        recomputed, so validating the same rows again gives the same result.

        Args:
            rows: Sequence of row mappings

        Returns:
            ValidationBatchResult with enriched rows and per-row errors

        Raises:
            ValueError: If rows is not a sequence of mappings
        """
        ensure_rows(rows)

        with LoggerContext(self.logger, "meter batch validation", rows=len(rows)):
            seen_dates: Set[str] = set()
            checked: List[Dict[str, Any]] = []
            errors: List[RowError] = []

            for index, row in enumerate(rows):
                canonical = strip_derived_fields(meter_fields.canonicalize(row))
                normalized, row_errors = self.processor.validate_meter_row(canonical, seen_dates)
                checked.append(normalized)
                if row_errors:
                    errors.append(RowError(row_number=index + constants.ROW_NUMBER_OFFSET, errors=row_errors))

            weather = self.build_index({r["Date"] for r in checked if is_valid_ddmmyyyy(r.get("Date"))})

            enriched = []
            for row in checked:
                date = row.get("Date")
                samples = weather.samples_for(date) if is_valid_ddmmyyyy(date) else []
                enriched.append(self.enricher.enrich(row, samples))

        self.logger.info(f"Validated {len(rows)} meter rows: {len(errors)} with errors")
        return ValidationBatchResult(rows=enriched, errors=errors)
