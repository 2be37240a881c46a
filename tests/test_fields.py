"""
Tests for row field resolution and numeric coercion.
"""

import pytest  # type: ignore

from src.solar_telemetry.core.fields import (
    FieldResolver,
    coerce_number,
    ensure_rows,
    is_blank,
    meter_fields,
    normalize_key,
    weather_fields,
)


class TestCoerceNumber:
    """Test cases for coerce_number."""

    @pytest.mark.parametrize("value,expected", [
        (0, 0.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        (-3, -3.0),
    ])
    def test_numbers(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_is_none(self, value):
        assert coerce_number(value) is None

    @pytest.mark.parametrize("value", ["abc", "12kW", True, float("nan"), "inf"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            coerce_number(value)


def test_normalize_key():
    assert normalize_key("Module_Temperature (°C)") == "moduletemperaturec"


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert not is_blank(0)
    assert not is_blank("x")


class TestFieldResolver:
    """Test cases for synonym-aware key canonicalization."""

    def test_weather_synonyms(self):
        row = {"date": "01-Jun-25", "TIME": "09:00", "Module Temperature": 30, "ambient_temp": 25}
        canonical = weather_fields.canonicalize(row)

        assert canonical == {"Date": "01-Jun-25", "Time": "09:00", "ModuleTemp": 30, "AmbientTemp": 25}

    def test_unknown_keys_pass_through(self):
        canonical = meter_fields.canonicalize({"Date": "01-06-2025", "Export1 Initial": 100})
        assert canonical["Export1 Initial"] == 100

    def test_first_non_blank_value_wins(self):
        canonical = meter_fields.canonicalize({"Start Time": "", "StartTime": "06:10"})
        assert canonical["Start Time"] == "06:10"

    def test_synonym_priority(self):
        canonical = meter_fields.canonicalize({"Start": "07:00", "Start Time": "06:00"})
        assert canonical["Start Time"] == "06:00"

    def test_resolve(self):
        resolver = FieldResolver({"POA": ["POA Pyranometer"]})
        assert resolver.resolve("poa pyranometer") == "POA"
        assert resolver.resolve("GHI") is None


class TestEnsureRows:
    """Test cases for batch shape checks."""

    def test_accepts_list_of_dicts(self):
        ensure_rows([{"Date": "01-06-2025"}])
        ensure_rows([])

    @pytest.mark.parametrize("rows", [None, "rows", {"Date": "01-06-2025"}, [{"a": 1}, 5]])
    def test_rejects_other_shapes(self, rows):
        with pytest.raises(ValueError):
            ensure_rows(rows)
