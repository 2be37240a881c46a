"""
Weather index service.

Prefetches the weather samples needed by a meter batch and groups them by
meter date, so each meter row can find its day's samples without another
round trip to the weather store.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from ..core import LoggerContext
from ..core.date_utils import DateUtils
from ..models import WeatherSample


class WeatherStore(Protocol):
    """Bulk weather lookup by equivalent date strings."""

    def fetch_by_date_variants(self, variants: Iterable[str]) -> List[Any]:
        ...


def _as_sample(sample: Any) -> WeatherSample:
    if isinstance(sample, Mapping):
        return WeatherSample.from_mapping(sample)
    return sample


class WeatherIndex:
    """Weather samples grouped by meter-dialect date string."""

    def __init__(
        self,
        store: WeatherStore,
        parallel: bool = False,
        max_workers: int = 4,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize weather index.

        Args:
            store: Weather store to read from
            parallel: Fetch each date separately on a thread pool instead of
                issuing one combined query
            max_workers: Thread pool size for parallel fetches
            logger: Logger instance
        """
        self.store = store
        self.parallel = parallel
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)
        self._groups: Dict[str, List[WeatherSample]] = {}

    def __len__(self) -> int:
        return len(self._groups)

    @staticmethod
    def _date_keys(dates: Iterable[str]) -> Dict[date, str]:
        """Map each parseable meter date to its calendar date (first spelling wins)."""
        keys: Dict[date, str] = {}
        for meter_date in dates:
            parsed = DateUtils.parse_date(meter_date)
            if parsed is not None:
                keys.setdefault(parsed, meter_date)
        return keys

    def _group(self, samples: Iterable[Any], keys: Dict[date, str]) -> None:
        for raw in samples:
            sample = _as_sample(raw)
            parsed = DateUtils.parse_date(sample.date)
            meter_date = keys.get(parsed) if parsed is not None else None
            if meter_date is None:
                continue
            self._groups.setdefault(meter_date, []).append(sample)

    def _fetch_combined(self, keys: Dict[date, str]) -> None:
        variants: List[str] = []
        for meter_date in keys.values():
            for variant in DateUtils.date_variants(meter_date):
                if variant not in variants:
                    variants.append(variant)

        self._group(self.store.fetch_by_date_variants(variants), keys)

    def _fetch_parallel(self, keys: Dict[date, str]) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self.store.fetch_by_date_variants, DateUtils.date_variants(meter_date)): meter_date
                for meter_date in keys.values()
            }
            for future in as_completed(futures):
                meter_date = futures[future]
                self._group(future.result(), {DateUtils.parse_date(meter_date): meter_date})

    def build(self, dates: Iterable[str]) -> "WeatherIndex":
        """
        Fetch and group the weather samples for a set of meter dates.

        Unparseable dates are ignored; their rows simply find no weather.

        Args:
            dates: Meter date strings referenced by the batch

        Returns:
            self, for chaining
        """
        self._groups = {}
        keys = self._date_keys(dates)
        if not keys:
            self.logger.debug("No valid dates to index")
            return self

        with LoggerContext(self.logger, f"weather prefetch for {len(keys)} dates"):
            if self.parallel:
                self._fetch_parallel(keys)
            else:
                self._fetch_combined(keys)

        missing = [d for d in keys.values() if d not in self._groups]
        if missing:
            self.logger.debug(f"No weather samples for {len(missing)} dates: {', '.join(missing)}")

        return self

    def samples_for(self, meter_date: str) -> List[WeatherSample]:
        """Get the samples of one meter date (empty list if none)."""
        return list(self._groups.get(meter_date, []))
