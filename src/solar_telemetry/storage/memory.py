"""
In-memory key-value stores for weather samples and meter records.

Records are keyed by their natural (date, time) key. Writes are upserts:
re-submitting a key replaces the stored record and keeps its creation time.
"""

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from ..core import constants
from ..core.date_utils import DateUtils
from ..models import MeterRecord, WeatherSample

RecordKey = Tuple[str, str]
T = TypeVar("T", WeatherSample, MeterRecord)


def _in_range(date_str: str, start: Optional[date], end: Optional[date]) -> bool:
    """Check a stored date against inclusive bounds; no bounds matches anything."""
    if start is None and end is None:
        return True
    day = DateUtils.parse_date(date_str)
    if day is None:
        return False
    return (start is None or day >= start) and (end is None or day <= end)


class InMemoryStore(Generic[T]):
    """Dictionary-backed store with upsert and bulk delete."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize store.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[RecordKey, T] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def upsert(self, record: T) -> bool:
        """
        Insert a record or replace the one stored under the same key.

        Args:
            record: Record to store

        Returns:
            True if the record was inserted, False if an existing one was updated
        """
        now = DateUtils.now_utc()
        with self._lock:
            existing = self._records.get(record.key)
            created_at = existing.created_at if existing is not None else now
            self._records[record.key] = replace(record, created_at=created_at, updated_at=now)

        return existing is None

    def get(self, date_str: str, time_str: str) -> Optional[T]:
        with self._lock:
            return self._records.get((date_str, time_str))

    def all(self) -> List[T]:
        """Get every stored record in insertion order."""
        with self._lock:
            return list(self._records.values())

    def count(self, status: Optional[str] = None) -> int:
        """Count records, optionally only those with the given status."""
        with self._lock:
            if status is None:
                return len(self._records)
            return sum(1 for record in self._records.values() if record.status == status)

    def delete_many(self, keys: Iterable[RecordKey]) -> int:
        """
        Delete records by key.

        Args:
            keys: (date, time) keys to remove; unknown keys are ignored

        Returns:
            Number of records deleted
        """
        deleted = 0
        with self._lock:
            for key in keys:
                if self._records.pop(tuple(key), None) is not None:
                    deleted += 1

        self.logger.info(f"Deleted {deleted} records")
        return deleted

    def mark_submitted(self, keys: Iterable[RecordKey]) -> int:
        """
        Move records to the submitted status.

        Args:
            keys: (date, time) keys to update

        Returns:
            Number of records updated
        """
        now = DateUtils.now_utc()
        updated = 0
        with self._lock:
            for key in keys:
                record = self._records.get(tuple(key))
                if record is None:
                    continue
                self._records[record.key] = replace(
                    record, status=constants.STATUS_SUBMITTED, updated_at=now
                )
                updated += 1

        return updated


class InMemoryWeatherStore(InMemoryStore[WeatherSample]):
    """Weather sample store."""

    def fetch_by_date_variants(self, variants: Iterable[str]) -> List[WeatherSample]:
        """
        Get every sample whose stored date string is one of the given variants.

        Args:
            variants: Date strings in any dialect

        Returns:
            Matching samples
        """
        wanted = {str(v).strip().lower() for v in variants}
        with self._lock:
            samples = [s for s in self._records.values() if s.date.strip().lower() in wanted]

        self.logger.debug(f"Fetched {len(samples)} weather samples for {len(wanted)} date variants")
        return samples

    def bulk_update_site_name(
        self,
        site_name: str,
        start_date: Any = None,
        end_date: Any = None,
        only_empty: bool = True
    ) -> Dict[str, Any]:
        """
        Assign a site name to many weather samples at once.

        Range bounds may be given in any date dialect. Samples whose date does
        not parse are left alone when a range is given.

        Args:
            site_name: New site name
            start_date: Earliest date to update, or None
            end_date: Latest date to update, or None
            only_empty: Only update samples without a site name

        Returns:
            Dictionary with matched and modified counts

        Raises:
            ValueError: If the site name is blank
        """
        name = (site_name or "").strip()
        if not name:
            raise ValueError("Site name is required")

        start = DateUtils.parse_date(start_date) if start_date is not None else None
        end = DateUtils.parse_date(end_date) if end_date is not None else None
        now = DateUtils.now_utc()

        matched = 0
        modified = 0
        with self._lock:
            for key, sample in list(self._records.items()):
                if only_empty and (sample.site_name or "").strip():
                    continue
                if not _in_range(sample.date, start, end):
                    continue

                matched += 1
                if sample.site_name != name:
                    self._records[key] = replace(sample, site_name=name, updated_at=now)
                    modified += 1

        self.logger.info(f"Site name '{name}' set on {modified} of {matched} matched weather samples")
        return {
            "matched": matched,
            "modified": modified,
            "siteName": name,
            "message": f'Updated {modified} record(s) to site name "{name}"' if matched
            else "No records matched the filter criteria",
        }

    def count_by_site(self) -> Dict[str, Any]:
        """
        Count samples per site name, largest group first.

        Samples without a site name are grouped under "No Site Name".
        """
        counts: Dict[str, int] = {}
        with self._lock:
            total = len(self._records)
            for sample in self._records.values():
                site = (sample.site_name or "").strip() or constants.NO_SITE_NAME
                counts[site] = counts.get(site, 0) + 1

        by_site = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return {
            "total": total,
            "bySite": [{"siteName": site, "count": count} for site, count in by_site],
        }


class InMemoryMeterStore(InMemoryStore[MeterRecord]):
    """Meter record store."""

    def find(
        self,
        status: Optional[str] = None,
        start_date: Any = None,
        end_date: Any = None
    ) -> List[MeterRecord]:
        """
        Get records filtered by status and an inclusive date range.

        Range bounds may be given in any date dialect or as ``date`` objects.
        Records whose date does not parse are excluded when a range is given.

        Args:
            status: Record status to match, or None for any
            start_date: Earliest date, or None
            end_date: Latest date, or None

        Returns:
            Matching records sorted by date then time
        """
        start: Optional[date] = DateUtils.parse_date(start_date) if start_date is not None else None
        end: Optional[date] = DateUtils.parse_date(end_date) if end_date is not None else None

        matches = []
        for record in self.all():
            if status is not None and record.status != status:
                continue

            if not _in_range(record.date, start, end):
                continue
            day = DateUtils.parse_date(record.date)
            matches.append((day or date.min, record.time, record))

        matches.sort(key=lambda item: (item[0], item[1]))
        return [record for _, _, record in matches]
