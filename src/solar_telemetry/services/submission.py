"""
Batch submission services.

Persists validated rows into the stores with upsert semantics keyed on
(date, time). Rows without a usable key are counted as skipped.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core import LoggerContext, constants
from ..core.date_utils import DateUtils, DateDialect
from ..core.fields import coerce_number, ensure_rows, is_blank, meter_fields, weather_fields
from ..models import MeterRecord, SubmissionResult, WeatherSample
from ..processing import strip_derived_fields
from ..storage import InMemoryMeterStore, InMemoryWeatherStore
from .enricher import MeterEnricher
from .weather_index import WeatherIndex, WeatherStore


def _number_or_zero(value: Any) -> float:
    try:
        number = coerce_number(value)
    except ValueError:
        return 0.0
    return 0.0 if number is None else number


class WeatherSubmitter:
    """Upsert weather rows into the weather store."""

    def __init__(self, store: InMemoryWeatherStore, logger: Optional[logging.Logger] = None):
        """
        Initialize weather submitter.

        Args:
            store: Weather store to write to
            logger: Logger instance
        """
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def to_sample(self, row: Mapping[str, Any]) -> Optional[WeatherSample]:
        """
        Convert a weather row to a sample with a normalized key.

        Returns:
            WeatherSample, or None if the row lacks a date or time
        """
        canonical = weather_fields.canonicalize(row)
        if is_blank(canonical.get("Date")) or is_blank(canonical.get("Time")):
            return None

        sample = WeatherSample.from_mapping(canonical)
        sample.date = DateUtils.normalize_date(canonical["Date"], DateDialect.WEATHER)
        sample.time = DateUtils.normalize_time(canonical["Time"])
        return sample

    def submit(self, rows: Any) -> SubmissionResult:
        """
        Upsert a batch of weather rows.

        Args:
            rows: Sequence of row mappings

        Returns:
            SubmissionResult with inserted, updated and skipped counts

        Raises:
            ValueError: If rows is not a sequence of mappings
        """
        ensure_rows(rows)
        result = SubmissionResult()

        with LoggerContext(self.logger, "weather submission", rows=len(rows)):
            for row in rows:
                sample = self.to_sample(row)
                if sample is None:
                    result.skipped_count += 1
                    continue

                if self.store.upsert(sample):
                    result.inserted_count += 1
                else:
                    result.updated_count += 1

        self.logger.info(
            f"Weather submission: {result.inserted_count} inserted, "
            f"{result.updated_count} updated, {result.skipped_count} skipped"
        )
        return result


class MeterSubmitter:
    """Upsert meter rows, recomputing their derived fields from current weather."""

    def __init__(
        self,
        store: InMemoryMeterStore,
        weather_store: WeatherStore,
        enricher: Optional[MeterEnricher] = None,
        parallel_fetch: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize meter submitter.

        Args:
            store: Meter store to write to
            weather_store: Weather store used to recompute plant times
            enricher: Meter enricher
            parallel_fetch: Fetch weather per date in parallel
            logger: Logger instance
        """
        self.store = store
        self.weather_store = weather_store
        self.logger = logger or logging.getLogger(__name__)
        self.enricher = enricher or MeterEnricher(logger=logger)
        self.parallel_fetch = parallel_fetch

    def to_record(self, row: Mapping[str, Any], samples: List[WeatherSample]) -> MeterRecord:
        """
        Build a meter record from a canonical row and its day's weather.

        Args:
            row: Canonical meter row with a normalized date
            samples: Weather samples of the row's date

        Returns:
            MeterRecord ready to upsert
        """
        operation = self.enricher.calculator.calculate(samples)
        totals = self.enricher.aggregator.calculate_totals(row)

        time = DateUtils.normalize_time(row.get("Time")) if not is_blank(row.get("Time")) else constants.DEFAULT_TIME
        status = row.get("status") or row.get("Status") or constants.STATUS_DRAFT
        site_name = row.get("Site Name")

        readings: Dict[str, Dict[str, float]] = {
            f"{pair.kind} {pair.meter_id}": {
                "initial": pair.initial,
                "final": pair.final,
                "total": pair.total,
            }
            for pair in totals.pairs
        }

        return MeterRecord(
            date=row["Date"],
            time=time,
            plant_start_time=operation.start_time,
            plant_stop_time=operation.stop_time,
            total_operating_time=operation.total_operating_time,
            active_energy_import=_number_or_zero(row.get("ActiveEnergyImport")),
            active_energy_export=totals.gss_export_total,
            reactive_energy_import=_number_or_zero(row.get("ReactiveEnergyImport")),
            reactive_energy_export=_number_or_zero(row.get("ReactiveEnergyExport")),
            voltage=_number_or_zero(row.get("Voltage")),
            current=_number_or_zero(row.get("Current")),
            frequency=_number_or_zero(row.get("Frequency")),
            power_factor=_number_or_zero(row.get("PowerFactor")),
            readings=readings,
            site_name=str(site_name).strip() if not is_blank(site_name) else None,
            status=status,
        )

    def submit(self, rows: Any) -> SubmissionResult:
        """
        Upsert a batch of meter rows.

        Plant start/stop/total are recomputed from the weather store so that
        stored records never carry stale derived values.

        Args:
            rows: Sequence of row mappings

        Returns:
            SubmissionResult with inserted, updated and skipped counts

        Raises:
            ValueError: If rows is not a sequence of mappings
        """
        ensure_rows(rows)
        result = SubmissionResult()

        canonical_rows = []
        for row in rows:
            canonical = strip_derived_fields(meter_fields.canonicalize(row))
            if is_blank(canonical.get("Date")):
                result.skipped_count += 1
                continue
            canonical["Date"] = DateUtils.normalize_date(canonical["Date"], DateDialect.METER)
            canonical_rows.append(canonical)

        with LoggerContext(self.logger, "meter submission", rows=len(canonical_rows)):
            weather = WeatherIndex(
                self.weather_store, parallel=self.parallel_fetch, logger=self.logger
            ).build({r["Date"] for r in canonical_rows})

            for row in canonical_rows:
                record = self.to_record(row, weather.samples_for(row["Date"]))
                if self.store.upsert(record):
                    result.inserted_count += 1
                else:
                    result.updated_count += 1

        self.logger.info(
            f"Meter submission: {result.inserted_count} inserted, "
            f"{result.updated_count} updated, {result.skipped_count} skipped"
        )
        return result
