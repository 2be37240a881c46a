"""
Tests for date/time normalization utilities.
"""

import pytest  # type: ignore
from datetime import date, datetime, time

from src.solar_telemetry.core.date_utils import DateUtils, DateDialect


class TestParseDate:
    """Test cases for parsing the accepted date forms."""

    @pytest.mark.parametrize("value", [
        "01-06-2025",
        "1-6-2025",
        "01-Jun-25",
        "01-JUN-25",
        "1/jun/25",
        "01/06/2025",
        "2025-06-01",
    ])
    def test_accepted_forms(self, value):
        """All accepted dialects parse to the same calendar date."""
        assert DateUtils.parse_date(value) == date(2025, 6, 1)

    def test_two_digit_year_maps_to_this_century(self):
        assert DateUtils.parse_date("15-Dec-99") == date(2099, 12, 15)

    @pytest.mark.parametrize("value", ["", "not a date", "31-Feb-25", "01-13-2025", "01-Foo-25", None])
    def test_invalid_dates(self, value):
        assert DateUtils.parse_date(value) is None

    def test_date_objects_pass_through(self):
        assert DateUtils.parse_date(date(2024, 12, 1)) == date(2024, 12, 1)
        assert DateUtils.parse_date(datetime(2024, 12, 1, 9, 30)) == date(2024, 12, 1)


class TestNormalizeDate:
    """Test cases for canonical date rendering."""

    def test_meter_dialect(self):
        assert DateUtils.normalize_date("1-Dec-24", DateDialect.METER) == "01-12-2024"

    def test_weather_dialect(self):
        assert DateUtils.normalize_date("01-12-2024", DateDialect.WEATHER) == "01-Dec-24"

    def test_iso_dialect(self):
        assert DateUtils.normalize_date("01/Dec/24", DateDialect.ISO) == "2024-12-01"

    def test_unparseable_input_returned_unchanged(self):
        assert DateUtils.normalize_date("  32-13-2024 ", DateDialect.METER) == "32-13-2024"
        assert DateUtils.normalize_date("garbage", DateDialect.WEATHER) == "garbage"

    def test_none_becomes_empty(self):
        assert DateUtils.normalize_date(None, DateDialect.METER) == ""

    @pytest.mark.parametrize("meter_date", ["01-01-2024", "29-02-2024", "15-06-2025", "31-12-2030"])
    def test_meter_weather_iso_round_trip(self, meter_date):
        """A meter date converted to weather and on to ISO is the same day."""
        weather = DateUtils.normalize_date(meter_date, DateDialect.WEATHER)
        iso = DateUtils.normalize_date(weather, DateDialect.ISO)

        assert DateUtils.parse_date(iso) == DateUtils.parse_date(meter_date)
        assert DateUtils.normalize_date(iso, DateDialect.METER) == meter_date


class TestDateVariants:
    """Test cases for equivalent date representations."""

    def test_variants_cover_all_dialects(self):
        variants = DateUtils.date_variants("1-6-2025")
        assert variants == ["1-6-2025", "01-06-2025", "01-Jun-25", "2025-06-01"]

    def test_variants_are_deduplicated(self):
        variants = DateUtils.date_variants("01-06-2025")
        assert variants.count("01-06-2025") == 1
        assert len(variants) == 3

    def test_unparseable_keeps_original_only(self):
        assert DateUtils.date_variants("someday") == ["someday"]

    def test_none(self):
        assert DateUtils.date_variants(None) == []


class TestTimes:
    """Test cases for clock time handling."""

    @pytest.mark.parametrize("value,expected", [
        ("9:30", "09:30"),
        ("09:30", "09:30"),
        ("09:30:45", "09:30"),
        (" 7:05 ", "07:05"),
        (time(6, 5), "06:05"),
        ("noon", "noon"),
        (None, ""),
    ])
    def test_normalize_time(self, value, expected):
        assert DateUtils.normalize_time(value) == expected

    @pytest.mark.parametrize("value,valid", [
        ("00:00", True),
        ("23:59", True),
        ("24:00", False),
        ("12:60", False),
        ("9:30", False),
        (None, False),
    ])
    def test_is_valid_time(self, value, valid):
        assert DateUtils.is_valid_time(value) is valid

    def test_time_to_minutes(self):
        assert DateUtils.time_to_minutes("10:15") == 615

    def test_time_to_minutes_rejects_invalid(self):
        with pytest.raises(ValueError):
            DateUtils.time_to_minutes("25:00")

    def test_minutes_to_hhmm_wraps(self):
        assert DateUtils.minutes_to_hhmm(615) == "10:15"
        assert DateUtils.minutes_to_hhmm(-60) == "23:00"
        assert DateUtils.minutes_to_hhmm(1440) == "00:00"


class TestTimezones:
    """Test cases for timezone handling."""

    def test_localize_date(self):
        localized = DateUtils().localize_date(date(2025, 6, 1), "Asia/Kolkata")
        assert DateUtils.to_iso_with_timezone(localized) == "2025-06-01T00:00:00+05:30"

    def test_invalid_timezone(self):
        with pytest.raises(ValueError, match="Invalid timezone"):
            DateUtils.parse_timezone("Mars/Olympus")

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValueError):
            DateUtils.to_iso_with_timezone(datetime(2025, 6, 1))

    def test_now_utc_is_aware(self):
        assert DateUtils.now_utc().tzinfo is not None
