"""
Tests for the plant operating window calculation.
"""

import pytest  # type: ignore

from src.solar_telemetry.algorithms import PlantOperationCalculator, PlantOperation
from src.solar_telemetry.models import WeatherSample


def _samples(*points):
    return [WeatherSample(date="01-Jun-25", time=t, poa=poa) for t, poa in points]


class TestPlantOperationCalculator:
    """Test cases for PlantOperationCalculator."""

    @pytest.fixture
    def calculator(self):
        return PlantOperationCalculator()

    def test_empty_sample_set(self, calculator):
        assert calculator.calculate([]) == PlantOperation("00:00", "00:00", "00:00")

    def test_start_at_threshold(self, calculator):
        operation = calculator.calculate(_samples(("08:30", 4.0), ("09:00", 10.0), ("12:00", 800.0)))
        assert operation.start_time == "09:00"

    def test_stop_is_last_sample_in_band(self, calculator):
        operation = calculator.calculate(_samples(("08:00", 60.0), ("17:30", 40.0), ("18:00", 0.0)))
        assert operation.start_time == "08:00"
        assert operation.stop_time == "17:30"
        assert operation.total_operating_time == "09:30"

    def test_stop_falls_back_to_last_positive(self, calculator):
        operation = calculator.calculate(_samples(("07:00", 120.0), ("16:00", 300.0), ("19:00", 0.0)))
        assert operation.stop_time == "16:00"

    def test_no_positive_readings(self, calculator):
        operation = calculator.calculate(_samples(("06:00", 0.0), ("07:00", 0.0)))
        assert operation == PlantOperation()

    def test_no_start_keeps_default(self, calculator):
        operation = calculator.calculate(_samples(("06:00", 3.0), ("18:00", 5.0)))
        assert operation.start_time == "00:00"
        assert operation.stop_time == "18:00"
        assert operation.total_operating_time == "18:00"

    def test_unsorted_input(self, calculator):
        operation = calculator.calculate(_samples(("17:30", 40.0), ("18:00", 0.0), ("08:00", 60.0)))
        assert operation.start_time == "08:00"
        assert operation.stop_time == "17:30"

    def test_unusable_samples_discarded(self, calculator):
        samples = _samples(("bad", 500.0), ("07:00", float("nan")), ("25:00", 30.0), ("9:15:30", 15.0))
        samples.append(WeatherSample(date="01-Jun-25", time="10:00", poa=None))

        operation = calculator.calculate(samples)

        assert operation.start_time == "09:15"
        assert operation.stop_time == "09:15"
        assert operation.total_operating_time == "00:00"

    def test_total_wraps_past_midnight(self):
        assert PlantOperationCalculator.operating_duration("22:00", "02:30") == "04:30"

    def test_accepts_mappings(self, calculator, weather_rows):
        operation = calculator.calculate(weather_rows)
        assert operation == PlantOperation("06:45", "18:10", "11:25")

    def test_custom_thresholds(self):
        calculator = PlantOperationCalculator(start_threshold=100.0, stop_upper=20.0)
        operation = calculator.calculate(_samples(("07:00", 50.0), ("08:00", 150.0), ("18:00", 15.0)))
        assert operation.start_time == "08:00"
        assert operation.stop_time == "18:00"
