"""
Date, time and timezone utilities.

Centralizes the handling of the textual date dialects used by the two
telemetry streams:

- meter data:   DD-MM-YYYY  (e.g. 01-06-2025)
- weather data: DD-MMM-YY   (e.g. 01-Jun-25)
- bridging:     YYYY-MM-DD  (ISO)

Dates from different dialects are compared by parsing them to
``datetime.date``; the string forms are only ever produced, never compared.
"""

import logging
import re
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional, Tuple

import pytz
from pytz.tzinfo import BaseTzInfo

from . import constants


class DateDialect(Enum):
    """Textual date representations understood by the normalizer."""

    METER = "DD-MM-YYYY"
    WEATHER = "DD-MMM-YY"
    ISO = "YYYY-MM-DD"


_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MONTH_NAME_RE = re.compile(r"^(\d{1,2})[-/ ]([A-Za-z]{3})[-/ ](\d{2}|\d{4})$")
_NUMERIC_RE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{2}|\d{4})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_STRICT_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(constants.MONTHS, start=1)}


def _expand_year(year: str) -> int:
    if len(year) == 2:
        return int(constants.CENTURY_PREFIX + year)
    return int(year)


class DateUtils:
    """Utilities for date dialects, clock times and timezone handling."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize date utilities.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Calendar dates
    # ------------------------------------------------------------------

    @staticmethod
    def _split_date(text: str) -> Optional[Tuple[int, int, int]]:
        """Split a date string into (year, month, day) without range checks."""
        match = _ISO_RE.match(text)
        if match:
            return int(match.group(1)), int(match.group(2)), int(match.group(3))

        match = _MONTH_NAME_RE.match(text)
        if match:
            month = _MONTH_LOOKUP.get(match.group(2).lower())
            if month is None:
                return None
            return _expand_year(match.group(3)), month, int(match.group(1))

        match = _NUMERIC_RE.match(text)
        if match:
            return _expand_year(match.group(3)), int(match.group(2)), int(match.group(1))

        return None

    @staticmethod
    def parse_date(value) -> Optional[date]:
        """
        Parse any accepted date representation into a calendar date.

        Accepted forms: DD-MM-YYYY, DD-MMM-YY, DD/Mon/YY, DD/MM/YYYY and
        YYYY-MM-DD, with 1- or 2-digit day/month segments. Month names are
        case-insensitive; a 2-digit year maps to 20YY.

        Args:
            value: Date string, ``date`` or ``datetime``

        Returns:
            Parsed date, or None if the value is not a valid calendar date
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if value is None:
            return None

        parts = DateUtils._split_date(str(value).strip())
        if parts is None:
            return None

        try:
            return date(*parts)
        except ValueError:
            return None

    @staticmethod
    def format_date(day: date, dialect: DateDialect) -> str:
        """
        Render a calendar date in the given dialect.

        Args:
            day: Calendar date
            dialect: Target dialect

        Returns:
            Formatted date string
        """
        if dialect is DateDialect.METER:
            return f"{day.day:02d}-{day.month:02d}-{day.year:04d}"
        if dialect is DateDialect.WEATHER:
            return f"{day.day:02d}-{constants.MONTHS[day.month - 1]}-{day.year % 100:02d}"
        return day.isoformat()

    @staticmethod
    def normalize_date(value, dialect: DateDialect) -> str:
        """
        Canonicalize a date into the form required by the target dataset.

        Unparseable input is returned unchanged (stripped); rejecting it is the
        validator's job.

        Args:
            value: Raw date value
            dialect: Target dialect

        Returns:
            Canonical date string, or the original text
        """
        if value is None:
            return ""

        parsed = DateUtils.parse_date(value)
        if parsed is None:
            return str(value).strip()
        return DateUtils.format_date(parsed, dialect)

    @staticmethod
    def date_variants(value) -> List[str]:
        """
        Get every equivalent string representation of a date.

        The original text is always included, followed by the meter, weather
        and ISO forms when the value parses.

        Args:
            value: Raw date value

        Returns:
            De-duplicated list of date strings
        """
        if value is None:
            return []

        text = str(value).strip()
        variants = [text] if text else []

        parsed = DateUtils.parse_date(value)
        if parsed is not None:
            for dialect in (DateDialect.METER, DateDialect.WEATHER, DateDialect.ISO):
                formatted = DateUtils.format_date(parsed, dialect)
                if formatted not in variants:
                    variants.append(formatted)

        return variants

    # ------------------------------------------------------------------
    # Clock times
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_time(value) -> str:
        """
        Normalize a clock time to zero-padded HH:MM.

        Accepts H:MM, HH:MM and HH:MM:SS (seconds are dropped). Anything else
        is returned unchanged (stripped).

        Args:
            value: Raw time value (string, ``time`` or ``datetime``)

        Returns:
            Normalized time string, or "" for blank input
        """
        if value is None:
            return ""
        if isinstance(value, (datetime, time)):
            return f"{value.hour:02d}:{value.minute:02d}"

        text = str(value).strip()
        match = _TIME_RE.match(text)
        if not match:
            return text
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    @staticmethod
    def is_valid_time(value) -> bool:
        """Check for a strict 24-hour HH:MM string."""
        return isinstance(value, str) and bool(_STRICT_TIME_RE.match(value.strip()))

    @staticmethod
    def time_to_minutes(hhmm: str) -> int:
        """
        Convert an HH:MM string to minutes since midnight.

        Raises:
            ValueError: If the string is not a valid HH:MM time
        """
        if not DateUtils.is_valid_time(hhmm):
            raise ValueError(f"Invalid time: {hhmm!r}")
        hours, minutes = hhmm.strip().split(":")
        return int(hours) * 60 + int(minutes)

    @staticmethod
    def minutes_to_hhmm(total: int) -> str:
        """Render minutes as HH:MM, wrapping modulo one day."""
        wrapped = total % constants.MINUTES_PER_DAY
        return f"{wrapped // 60:02d}:{wrapped % 60:02d}"

    # ------------------------------------------------------------------
    # Timezones
    # ------------------------------------------------------------------

    @staticmethod
    def parse_timezone(timezone_str: str) -> BaseTzInfo:
        """
        Parse timezone string to pytz timezone object.

        Args:
            timezone_str: Timezone string (e.g., 'Asia/Kolkata', 'UTC')

        Returns:
            pytz timezone object

        Raises:
            ValueError: If timezone is invalid
        """
        try:
            return pytz.timezone(timezone_str)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Invalid timezone: {timezone_str}")

    def localize_date(self, day: date, timezone_str: str) -> datetime:
        """
        Get midnight of a calendar date in the given timezone.

        Args:
            day: Calendar date
            timezone_str: Timezone string

        Returns:
            Timezone-aware datetime at local midnight
        """
        tz = self.parse_timezone(timezone_str)
        localized = tz.localize(datetime.combine(day, datetime.min.time()))
        self.logger.debug(f"Localized {day.isoformat()} to {localized.isoformat()}")
        return localized

    @staticmethod
    def to_iso_with_timezone(dt: datetime) -> str:
        """
        Convert datetime to ISO format string with timezone.

        Raises:
            ValueError: If datetime is not timezone-aware
        """
        if dt.tzinfo is None:
            raise ValueError("Datetime must be timezone-aware")

        return dt.isoformat()

    @staticmethod
    def now_utc() -> datetime:
        """Get the current time as an aware UTC datetime."""
        return datetime.now(pytz.UTC)
