"""
Plant operating window calculation.

Derives the daily plant start time, stop time and total operating duration
from plane-of-array (POA) irradiance samples:

- Start: the earliest sample with POA at or above the start threshold
  (10 W/m² by default).
- Stop: the latest sample whose POA lies strictly inside the stop band
  (0-50 W/m² by default). When no sample falls in the band, the latest sample
  with any positive POA is used instead.
- Total: stop minus start, wrapped modulo one day.

A day without usable samples yields 00:00 for all three values.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ..core import constants
from ..core.date_utils import DateUtils
from ..models import WeatherSample


@dataclass(frozen=True)
class PlantOperation:
    """Derived operating window of one day."""

    start_time: str = constants.DEFAULT_TIME
    stop_time: str = constants.DEFAULT_TIME
    total_operating_time: str = constants.DEFAULT_TIME


class PlantOperationCalculator:
    """Irradiance-threshold calculator for plant start/stop times."""

    def __init__(
        self,
        start_threshold: float = constants.POA_START_THRESHOLD,
        stop_lower: float = constants.POA_STOP_LOWER,
        stop_upper: float = constants.POA_STOP_UPPER,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize calculator.

        Args:
            start_threshold: POA (W/m²) at or above which the plant has started
            stop_lower: Exclusive lower bound of the stop band (W/m²)
            stop_upper: Exclusive upper bound of the stop band (W/m²)
            logger: Logger instance
        """
        self.start_threshold = start_threshold
        self.stop_lower = stop_lower
        self.stop_upper = stop_upper
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _to_point(sample: Any) -> Optional[Tuple[int, str, float]]:
        """Reduce a sample to (minutes, HH:MM, poa), or None if unusable."""
        if isinstance(sample, Mapping):
            sample = WeatherSample.from_mapping(sample)

        time_str = DateUtils.normalize_time(getattr(sample, "time", None))
        if not DateUtils.is_valid_time(time_str):
            return None

        poa = getattr(sample, "poa", None)
        if poa is None or isinstance(poa, bool):
            return None
        try:
            poa = float(poa)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(poa):
            return None

        return DateUtils.time_to_minutes(time_str), time_str, poa

    def usable_points(self, samples: Iterable[Any]) -> List[Tuple[int, str, float]]:
        """
        Filter and sort samples by time of day.

        Args:
            samples: WeatherSample objects or mappings with time and POA

        Returns:
            List of (minutes since midnight, HH:MM, poa), ascending by time
        """
        points = [p for p in (self._to_point(s) for s in samples) if p is not None]
        points.sort(key=lambda p: p[0])
        return points

    def find_start_time(self, points: List[Tuple[int, str, float]]) -> str:
        for _, time_str, poa in points:
            if poa >= self.start_threshold:
                return time_str
        return constants.DEFAULT_TIME

    def find_stop_time(self, points: List[Tuple[int, str, float]]) -> str:
        for _, time_str, poa in reversed(points):
            if self.stop_lower < poa < self.stop_upper:
                return time_str

        # No sample in the stop band: fall back to the last positive reading
        for _, time_str, poa in reversed(points):
            if poa > self.stop_lower:
                return time_str

        return constants.DEFAULT_TIME

    @staticmethod
    def operating_duration(start_time: str, stop_time: str) -> str:
        """
        Get stop minus start as HH:MM, wrapping forward past midnight.

        Args:
            start_time: HH:MM
            stop_time: HH:MM

        Returns:
            Duration as HH:MM
        """
        if not (DateUtils.is_valid_time(start_time) and DateUtils.is_valid_time(stop_time)):
            return constants.DEFAULT_TIME
        minutes = DateUtils.time_to_minutes(stop_time) - DateUtils.time_to_minutes(start_time)
        return DateUtils.minutes_to_hhmm(minutes)

    def calculate(self, samples: Iterable[Any]) -> PlantOperation:
        """
        Derive the operating window for one day of weather samples.

        Args:
            samples: The day's weather samples (may be empty)

        Returns:
            PlantOperation with start, stop and total as HH:MM
        """
        points = self.usable_points(samples)
        if not points:
            return PlantOperation()

        start_time = self.find_start_time(points)
        stop_time = self.find_stop_time(points)
        total = self.operating_duration(start_time, stop_time)

        self.logger.debug(
            f"Plant operation from {len(points)} samples: "
            f"start={start_time}, stop={stop_time}, total={total}"
        )

        return PlantOperation(start_time=start_time, stop_time=stop_time, total_operating_time=total)
