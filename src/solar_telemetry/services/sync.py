"""
Daily generation sync service.

Aggregates submitted meter records per date, posts the daily export total
to the daily generation service and exports the daily totals as JSON or CSV.
"""

import csv
import io
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union, TYPE_CHECKING

from ..core import constants
from ..core.date_utils import DateUtils
from ..models import DailyGeneration, MeterRecord
from ..storage import InMemoryMeterStore

if TYPE_CHECKING:
    from ..api import DailyGenerationAPI


class DailyGenerationSync:
    """Push per-day generation totals derived from submitted meter records."""

    def __init__(
        self,
        meter_store: InMemoryMeterStore,
        api_client: "DailyGenerationAPI",
        timezone: str = "UTC",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize sync service.

        Args:
            meter_store: Store holding meter records
            api_client: Daily generation API client
            timezone: Timezone in which calendar dates are localized
            logger: Logger instance
        """
        self.meter_store = meter_store
        self.api_client = api_client
        self.timezone = timezone
        self.logger = logger or logging.getLogger(__name__)
        self.date_utils = DateUtils(logger)

    @staticmethod
    def aggregate_daily_totals(records: Iterable[MeterRecord]) -> List[DailyGeneration]:
        """
        Sum the active energy export of meter records per date.

        The site name and plant times of the first record of a date are used
        for that date.

        Args:
            records: Meter records

        Returns:
            One DailyGeneration per date, in first-seen order
        """
        daily: Dict[str, DailyGeneration] = {}

        for record in records:
            total = daily.get(record.date)
            if total is None:
                total = DailyGeneration(
                    date=record.date,
                    site_name=record.site_name or constants.UNKNOWN_SITE,
                    total_export=0.0,
                    record_count=0,
                    plant_start_time=record.plant_start_time or constants.DEFAULT_TIME,
                    plant_stop_time=record.plant_stop_time or constants.DEFAULT_TIME,
                    total_operating_time=record.total_operating_time or constants.DEFAULT_TIME,
                )
                daily[record.date] = total

            total.total_export += record.active_energy_export or 0.0
            total.record_count += 1

        return list(daily.values())

    def get_site_mapping(self) -> Dict[str, str]:
        """
        Build a site key -> site id mapping from the generation service.

        Keys are the lower-cased site name, ``site-<number>`` and ``default``
        (the first site). An unreachable service yields an empty mapping.

        Returns:
            Site mapping dictionary
        """
        try:
            sites = self.api_client.get_sites()
        except Exception as e:
            self.logger.error(f"Failed to fetch site mapping: {e}")
            return {}

        mapping: Dict[str, str] = {}
        for site in sites:
            site_id = site.get("_id") or site.get("id")
            if not site_id:
                continue

            name = site.get("siteName")
            if name:
                mapping[str(name).lower()] = site_id

            number = site.get("siteNumber")
            if number:
                mapping[f"site-{number}"] = site_id

            mapping.setdefault(constants.DEFAULT_SITE_KEY, site_id)

        self.logger.info(f"Loaded site mapping: {len(mapping)} mappings")
        return mapping

    def build_payload(self, daily: DailyGeneration, site_id: str) -> Dict[str, Any]:
        """
        Build the request body for one day's generation.

        Raises:
            ValueError: If the date cannot be parsed
        """
        day = DateUtils.parse_date(daily.date)
        if day is None:
            raise ValueError(f"Invalid meter date: {daily.date}")

        localized = self.date_utils.localize_date(day, self.timezone)
        return {
            "site": site_id,
            "date": self.date_utils.to_iso_with_timezone(localized),
            "dailyGeneration": daily.total_export,
            "status": constants.STATUS_SUBMITTED,
        }

    def sync_to_daily_generation(self, date_range: Optional[Tuple[Any, Any]] = None) -> Dict[str, Any]:
        """
        Sync submitted meter records to the daily generation service.

        Args:
            date_range: Optional inclusive (start_date, end_date)

        Returns:
            Summary with synced count, total dates and per-date results
        """
        start_date, end_date = date_range if date_range else (None, None)
        records = self.meter_store.find(
            status=constants.STATUS_SUBMITTED, start_date=start_date, end_date=end_date
        )

        if not records:
            self.logger.info("No submitted meter records found to sync")
            return {"synced": 0, "total": 0, "results": [], "message": "No records to sync"}

        daily_totals = self.aggregate_daily_totals(records)
        self.logger.info(f"Aggregated {len(daily_totals)} daily records")

        site_mapping = self.get_site_mapping()

        results: List[Dict[str, Any]] = []
        for daily in daily_totals:
            site_id = site_mapping.get(daily.site_name.lower()) or site_mapping.get(constants.DEFAULT_SITE_KEY)
            if not site_id:
                self.logger.warning(f"No site mapping found for {daily.site_name}, skipping {daily.date}")
                results.append({"date": daily.date, "success": False, "error": "No site mapping"})
                continue

            try:
                response = self.api_client.post_daily_generation(self.build_payload(daily, site_id))
                results.append({"date": daily.date, "success": True, "data": response})
                self.logger.info(f"Synced {daily.date}: {daily.total_export} kWh")
            except Exception as e:
                self.logger.error(f"Failed to sync {daily.date}: {e}")
                results.append({"date": daily.date, "success": False, "error": str(e)})

        synced = sum(1 for r in results if r["success"])
        return {
            "synced": synced,
            "total": len(daily_totals),
            "results": results,
            "message": f"Synced {synced} out of {len(daily_totals)} daily records",
        }

    def sync_date(self, date: Any) -> Dict[str, Any]:
        """Sync the submitted meter records of a single date."""
        return self.sync_to_daily_generation((date, date))

    def auto_sync_on_submit(self, submitted_records: Iterable[MeterRecord]) -> Dict[str, Any]:
        """
        Sync every date touched by a submission.

        Failures are logged and reported in the result, never raised.

        Args:
            submitted_records: Records that were just submitted

        Returns:
            Summary with synced count and number of dates
        """
        try:
            dates: List[str] = []
            for record in submitted_records:
                if record.date not in dates:
                    dates.append(record.date)

            if not dates:
                return {"synced": 0, "dates": 0, "message": "No records to auto-sync"}

            self.logger.info(f"Auto-syncing {len(dates)} dates after submission")
            synced = sum(self.sync_date(date)["synced"] for date in dates)

            return {"synced": synced, "dates": len(dates), "message": f"Auto-synced {len(dates)} dates"}

        except Exception as e:
            self.logger.error(f"Auto-sync failed: {e}", exc_info=True)
            return {"synced": 0, "error": str(e)}

    def get_sync_status(self) -> Dict[str, Any]:
        """
        Count meter records by status.

        Submitted records are the ones a sync would push.

        Returns:
            Dictionary with total, submitted, draft and syncable counts
        """
        submitted = self.meter_store.count(constants.STATUS_SUBMITTED)
        draft = self.meter_store.count(constants.STATUS_DRAFT)
        return {
            "total": submitted + draft,
            "submitted": submitted,
            "draft": draft,
            "syncable": submitted,
            "lastChecked": self.date_utils.to_iso_with_timezone(DateUtils.now_utc()),
        }

    def export_data(
        self,
        start_date: Any = None,
        end_date: Any = None,
        fmt: str = "json"
    ) -> Union[Dict[str, Any], str]:
        """
        Export daily totals of submitted meter records.

        Args:
            start_date: Earliest date, or None
            end_date: Latest date, or None
            fmt: "json" for a dictionary, "csv" for CSV text

        Returns:
            Export dictionary or CSV text

        Raises:
            ValueError: If the format is not supported
        """
        if fmt not in constants.EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")

        records = self.meter_store.find(
            status=constants.STATUS_SUBMITTED, start_date=start_date, end_date=end_date
        )
        daily_totals = self.aggregate_daily_totals(records)
        self.logger.info(f"Exporting {len(daily_totals)} daily records as {fmt}")

        if fmt == "csv":
            return self.to_csv(daily_totals)

        return {
            "total": len(daily_totals),
            "records": [daily.to_dict() for daily in daily_totals],
            "exportedAt": self.date_utils.to_iso_with_timezone(DateUtils.now_utc()),
        }

    @staticmethod
    def to_csv(daily_totals: Iterable[DailyGeneration]) -> str:
        """Render daily totals as CSV text with a header row."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(constants.EXPORT_CSV_HEADER)
        for daily in daily_totals:
            writer.writerow([
                daily.date,
                daily.site_name,
                daily.total_export,
                daily.plant_start_time,
                daily.plant_stop_time,
                daily.total_operating_time,
            ])
        return buffer.getvalue()
