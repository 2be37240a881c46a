"""
Tests for weather row validation.
"""

import pytest  # type: ignore
from unittest.mock import Mock

from src.solar_telemetry.processing import WeatherValidator, is_valid_ddmmmyy


def _row(**overrides):
    row = {
        "Date": "01-Dec-24",
        "Time": "09:30",
        "POA": 500,
        "GHI": 450,
        "ModuleTemp": 35,
        "AmbientTemp": 28,
    }
    row.update(overrides)
    return row


class TestWeatherValidator:
    """Test cases for WeatherValidator."""

    @pytest.fixture
    def validator(self):
        return WeatherValidator(logger=Mock())

    def _errors(self, validator, row):
        return validator.validate_row(row, set())[1]

    def test_valid_row(self, validator):
        assert self._errors(validator, _row()) == []

    def test_fixture_rows_are_valid(self, validator, weather_rows):
        result = validator.validate_rows(weather_rows)
        assert result.is_valid
        assert len(result.rows) == len(weather_rows)

    def test_missing_date_and_time(self, validator):
        errors = self._errors(validator, _row(Date="", Time=None))
        assert errors == ["Missing Date", "Missing Time"]

    def test_invalid_date_format(self, validator):
        errors = self._errors(validator, _row(Date="Dec 1st"))
        assert errors == ["Invalid Date format (expected DD-MMM-YY, e.g., 01-Dec-24)"]

    def test_date_normalized_to_weather_dialect(self, validator):
        row, errors = validator.validate_row(_row(Date="01-12-2024", Time="9:30:00"), set())
        assert errors == []
        assert row["Date"] == "01-Dec-24"
        assert row["Time"] == "09:30"

    def test_invalid_time(self, validator):
        errors = self._errors(validator, _row(Time="25:10"))
        assert errors == ["Invalid Time format (expected HH:MM 24-hour, e.g., 09:30)"]

    def test_duplicate_date_time(self, validator):
        result = validator.validate_rows([_row(), _row(POA=600), _row(Time="10:00")])

        assert [e.row_number for e in result.errors] == [3]
        assert result.errors[0].errors == ["Duplicate Date & Time combination"]

    def test_duplicate_detection_across_dialects(self, validator):
        result = validator.validate_rows([_row(), _row(Date="01-12-2024")])
        assert result.errors[0].errors == ["Duplicate Date & Time combination"]

    def test_zero_values_allowed(self, validator):
        errors = self._errors(
            validator,
            _row(POA=0, GHI=0, AlbedoUp=0, AlbedoDown=0, AmbientTemp=0, WindSpeed=0, Rainfall=0, Humidity=0),
        )
        assert errors == []

    def test_blank_values_skipped(self, validator):
        errors = self._errors(validator, _row(POA="", GHI=None, ModuleTemp="  "))
        assert errors == []

    @pytest.mark.parametrize("field,value,message", [
        ("POA", 1500.1, "POA Pyranometer must be between 0 and 1500"),
        ("GHI", -1, "GHI Pyranometer must be between 0 and 1500"),
        ("AlbedoUp", "x", "Albedo Up must be a number"),
        ("AmbientTemp", 101, "Ambient Temperature must be between 0 and 100"),
        ("WindSpeed", 201, "Wind Speed must be between 0 and 200"),
        ("Rainfall", 501, "Rainfall must be between 0 and 500"),
        ("Humidity", 100.5, "Humidity must be between 0 and 100"),
    ])
    def test_range_checks(self, validator, field, value, message):
        assert self._errors(validator, _row(**{field: value})) == [message]

    @pytest.mark.parametrize("value,message", [
        (0, "Module Temperature cannot be 0"),
        (-1, "Module Temperature cannot be negative"),
        (100.5, "Module Temperature must be ≤ 100°C"),
        ("hot", "Module Temperature must be a number"),
    ])
    def test_module_temperature(self, validator, value, message):
        assert self._errors(validator, _row(ModuleTemp=value)) == [message]

    def test_multiple_defects_accumulate(self, validator):
        errors = self._errors(validator, _row(Time="", POA=-5, ModuleTemp=0))
        assert "Missing Time" in errors
        assert "POA Pyranometer must be between 0 and 1500" in errors
        assert "Module Temperature cannot be 0" in errors

    def test_synonym_columns_are_validated(self, validator):
        result = validator.validate_rows([{"Date": "01-Dec-24", "Time": "09:30", "Module Temperature": 0}])
        assert result.errors[0].errors == ["Module Temperature cannot be 0"]

    def test_other_fields_untouched(self, validator):
        result = validator.validate_rows([_row(Notes="cloudy")])
        assert result.rows[0]["Notes"] == "cloudy"
        assert result.rows[0]["POA"] == 500

    def test_rejects_non_sequence(self, validator):
        with pytest.raises(ValueError):
            validator.validate_rows({"Date": "01-Dec-24"})


@pytest.mark.parametrize("value,valid", [
    ("01-Dec-24", True),
    ("31-jan-25", True),
    ("32-Dec-24", False),
    ("1-Dec-24", False),
    ("01-Dex-24", False),
    ("01-Dec-2024", False),
])
def test_is_valid_ddmmmyy(value, valid):
    assert is_valid_ddmmmyy(value) is valid
