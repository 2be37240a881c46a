"""
Upload batch pipeline.

An uploaded batch moves through

    PARSED -> VALIDATED -> (EDITED -> VALIDATED)* -> SUBMITTED

Validation can run any number of times. Submission requires the batch to have
been validated since its last edit and is terminal: an edit or a re-upload
starts a new batch.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, TYPE_CHECKING

from ..core import constants
from ..core.fields import ensure_rows
from ..models import SubmissionResult, ValidationBatchResult
from ..storage import InMemoryMeterStore, InMemoryWeatherStore
from .submission import MeterSubmitter, WeatherSubmitter
from .validation import MeterValidationService, WeatherValidationService
from .weather_index import WeatherStore

if TYPE_CHECKING:
    from ..core.config import Config
    from .sync import DailyGenerationSync


class BatchState(Enum):
    """Workflow state of an upload batch."""

    PARSED = "parsed"
    VALIDATED = "validated"
    EDITED = "edited"
    SUBMITTED = "submitted"


class BatchValidator(Protocol):
    def validate(self, rows: Any) -> ValidationBatchResult:
        ...


class BatchSubmitter(Protocol):
    def submit(self, rows: Any) -> SubmissionResult:
        ...


class UploadBatch:
    """One uploaded sheet moving through validation and submission."""

    def __init__(
        self,
        rows: List[Mapping[str, Any]],
        validator: BatchValidator,
        submitter: BatchSubmitter,
        on_submitted=None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize upload batch.

        Args:
            rows: Parsed rows of the sheet
            validator: Validation service for the sheet kind
            submitter: Submission service for the sheet kind
            on_submitted: Optional callback receiving the submitted rows
            logger: Logger instance

        Raises:
            ValueError: If rows is not a sequence of mappings
        """
        ensure_rows(rows)
        self.rows: List[Dict[str, Any]] = [dict(row) for row in rows]
        self.validator = validator
        self.submitter = submitter
        self.on_submitted = on_submitted
        self.logger = logger or logging.getLogger(__name__)
        self.state = BatchState.PARSED
        self.last_result: Optional[ValidationBatchResult] = None

    @property
    def is_validated(self) -> bool:
        """Whether the current rows have been validated since the last change."""
        return self.state is BatchState.VALIDATED

    @property
    def is_valid(self) -> bool:
        """Whether the current rows are validated and free of defects."""
        return self.is_validated and self.last_result is not None and self.last_result.is_valid

    def _ensure_editable(self) -> None:
        if self.state is BatchState.SUBMITTED:
            raise RuntimeError("Batch has already been submitted; upload a new batch to make changes")

    def edit_row(self, index: int, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Apply cell changes to one row.

        Args:
            index: Zero-based row index
            changes: Column -> new value

        Returns:
            The edited row

        Raises:
            RuntimeError: If the batch has been submitted
            IndexError: If the index is out of range
        """
        self._ensure_editable()
        if not 0 <= index < len(self.rows):
            raise IndexError(f"Row index {index} out of range (batch has {len(self.rows)} rows)")

        self.rows[index].update(changes)
        self.state = BatchState.EDITED
        self.logger.debug(f"Edited row {index + constants.ROW_NUMBER_OFFSET}: {sorted(changes)}")
        return self.rows[index]

    def replace_rows(self, rows: List[Mapping[str, Any]]) -> None:
        """
        Replace every row of the batch, e.g. after bulk editing in a table.

        Raises:
            RuntimeError: If the batch has been submitted
            ValueError: If rows is not a sequence of mappings
        """
        self._ensure_editable()
        ensure_rows(rows)
        self.rows = [dict(row) for row in rows]
        self.state = BatchState.EDITED

    def validate(self) -> ValidationBatchResult:
        """
        Validate the current rows.

        The rows are replaced with the validated output (normalized dates and
        times, derived fields).

        Returns:
            ValidationBatchResult

        Raises:
            RuntimeError: If the batch has been submitted
        """
        self._ensure_editable()
        result = self.validator.validate(self.rows)
        self.rows = [dict(row) for row in result.rows]
        self.last_result = result
        self.state = BatchState.VALIDATED
        return result

    def submit(self, valid_only: bool = False) -> SubmissionResult:
        """
        Persist the batch.

        Args:
            valid_only: Submit only the rows without defects instead of
                refusing a batch that has any

        Returns:
            SubmissionResult

        Raises:
            RuntimeError: If the batch was already submitted, has not been
                validated since its last change, or has defects and
                valid_only is False
        """
        if self.state is BatchState.SUBMITTED:
            raise RuntimeError("Batch has already been submitted")
        if not self.is_validated or self.last_result is None:
            raise RuntimeError("Batch must be validated after its last change before it can be submitted")
        if not self.last_result.is_valid and not valid_only:
            raise RuntimeError(
                f"Batch has {len(self.last_result.errors)} rows with errors; "
                f"fix them or submit valid rows only"
            )

        rows = self.last_result.valid_rows()
        result = self.submitter.submit(rows)
        self.state = BatchState.SUBMITTED

        if self.on_submitted is not None:
            self.on_submitted(rows)

        return result


class BatchPipeline:
    """
    Entry point wiring validation, submission and sync for both sheet kinds.
    """

    def __init__(
        self,
        weather_store: Optional[InMemoryWeatherStore] = None,
        meter_store: Optional[InMemoryMeterStore] = None,
        weather_source: Optional[WeatherStore] = None,
        sync: Optional["DailyGenerationSync"] = None,
        config: Optional["Config"] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize pipeline.

        Args:
            weather_store: Store receiving submitted weather rows
            meter_store: Store receiving submitted meter rows
            weather_source: Store queried for weather when processing meter
                rows (defaults to weather_store)
            sync: Daily generation sync run after meter submissions
            config: Application configuration (thresholds, fetch mode)
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.weather_store = weather_store if weather_store is not None else InMemoryWeatherStore(logger)
        self.meter_store = meter_store if meter_store is not None else InMemoryMeterStore(logger)
        self.weather_source = weather_source if weather_source is not None else self.weather_store
        self.sync = sync

        self.weather_validation = WeatherValidationService(logger=logger)
        if config is not None:
            self.meter_validation = MeterValidationService.from_config(config, self.weather_source, logger)
        else:
            self.meter_validation = MeterValidationService(self.weather_source, logger=logger)

        self.weather_submitter = WeatherSubmitter(self.weather_store, logger)
        self.meter_submitter = MeterSubmitter(
            self.meter_store,
            self.weather_source,
            enricher=self.meter_validation.enricher,
            parallel_fetch=self.meter_validation.parallel_fetch,
            logger=logger,
        )

    def validate_weather(self, rows: Any) -> ValidationBatchResult:
        return self.weather_validation.validate(rows)

    def validate_meter(self, rows: Any) -> ValidationBatchResult:
        return self.meter_validation.validate(rows)

    def submit_weather(self, rows: Any) -> SubmissionResult:
        return self.weather_submitter.submit(rows)

    def submit_meter(self, rows: Any) -> SubmissionResult:
        return self.meter_submitter.submit(rows)

    def _weather_submitted(self, rows: List[Dict[str, Any]]) -> None:
        keys = []
        for row in rows:
            sample = self.weather_submitter.to_sample(row)
            if sample is not None:
                keys.append(sample.key)
        self.weather_store.mark_submitted(keys)

    def _meter_submitted(self, rows: List[Dict[str, Any]]) -> None:
        dates = {row.get("Date") for row in rows}
        records = [r for r in self.meter_store.all() if r.date in dates]
        self.meter_store.mark_submitted(r.key for r in records)

        if self.sync is not None:
            self.sync.auto_sync_on_submit(records)

    def weather_batch(self, rows: List[Mapping[str, Any]]) -> UploadBatch:
        """Start a new weather upload batch."""
        return UploadBatch(
            rows, self.weather_validation, self.weather_submitter,
            on_submitted=self._weather_submitted, logger=self.logger
        )

    def meter_batch(self, rows: List[Mapping[str, Any]]) -> UploadBatch:
        """Start a new meter upload batch."""
        return UploadBatch(
            rows, self.meter_validation, self.meter_submitter,
            on_submitted=self._meter_submitted, logger=self.logger
        )
