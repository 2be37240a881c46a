"""
Tests for the command line application.
"""

import json
import sys

import pytest  # type: ignore

from src.solar_telemetry import main as cli
from src.solar_telemetry.main import SolarTelemetryApp, load_rows


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory with logs kept there."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    monkeypatch.delenv("WEATHER_API_URL", raising=False)
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "test.log"))
    return tmp_path


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadRows:
    """Test cases for load_rows."""

    def test_list(self, tmp_path):
        assert load_rows(_write(tmp_path / "rows.json", [{"Date": "01-06-2025"}])) == [{"Date": "01-06-2025"}]

    def test_wrapped(self, tmp_path):
        assert load_rows(_write(tmp_path / "rows.json", {"rows": [{"a": 1}]})) == [{"a": 1}]

    def test_invalid(self, tmp_path):
        with pytest.raises(ValueError):
            load_rows(_write(tmp_path / "rows.json", {"data": 1}))


class TestSolarTelemetryApp:
    """Test cases for SolarTelemetryApp."""

    def test_meter_validation_with_weather_file(self, tmp_path, weather_rows, meter_rows):
        app = SolarTelemetryApp(weather_file=_write(tmp_path / "weather.json", weather_rows))

        result = app.validate("meter", meter_rows)

        assert result.error_row_numbers() == [3]
        assert result.rows[0]["Plant Start Time"] == "06:45"
        assert result.rows[2]["Plant Start Time"] == "00:00"

    def test_submit_valid_only(self, meter_rows):
        app = SolarTelemetryApp()

        output = app.submit("meter", meter_rows, valid_only=True)

        assert output["submission"]["insertedCount"] == 2
        assert output["validation"]["isValid"] is False

    def test_config_file_used(self, tmp_path, meter_rows):
        config = _write(tmp_path / "config.json", {
            "processing": {"timezone": "UTC", "poa_start_threshold": 500},
        })
        weather = _write(tmp_path / "weather.json", [
            {"Date": "01-Jun-25", "Time": "08:00", "POA": 100},
            {"Date": "01-Jun-25", "Time": "11:00", "POA": 600},
        ])

        app = SolarTelemetryApp(config_file=config, weather_file=weather)
        result = app.validate("meter", meter_rows[:1])

        assert result.rows[0]["Plant Start Time"] == "11:00"

    def test_weather_file_overrides_weather_service(self, tmp_path, weather_rows, meter_rows):
        config = _write(tmp_path / "config.json", {
            "processing": {"timezone": "UTC"},
            "weather_api": {"base_url": "http://weather.invalid/api"},
        })
        weather = _write(tmp_path / "weather.json", weather_rows)

        app = SolarTelemetryApp(config_file=config, weather_file=weather)
        result = app.validate("meter", meter_rows[:1])

        assert app.weather_api is None
        assert result.rows[0]["Plant Start Time"] == "06:45"

    def test_weather_service_used_without_weather_file(self, tmp_path):
        config = _write(tmp_path / "config.json", {
            "processing": {"timezone": "UTC"},
            "weather_api": {"base_url": "http://weather.invalid/api"},
        })

        app = SolarTelemetryApp(config_file=config)

        assert app.weather_api is not None
        assert app.pipeline.weather_source is app.weather_api

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            SolarTelemetryApp().validate("solar", [])


class TestMain:
    """Test cases for the CLI entry point."""

    def test_validate_invalid_batch_exits_1(self, tmp_path, monkeypatch, capsys, meter_rows):
        rows = _write(tmp_path / "rows.json", meter_rows)
        monkeypatch.setattr(sys, "argv", ["solar-telemetry", "validate", "--kind", "meter", rows])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["errors"][0]["rowNumber"] == 3

    def test_validate_valid_batch(self, tmp_path, monkeypatch, capsys, weather_rows):
        rows = _write(tmp_path / "rows.json", weather_rows)
        monkeypatch.setattr(sys, "argv", ["solar-telemetry", "validate", "--kind", "weather", rows])

        cli.main()

        assert json.loads(capsys.readouterr().out)["isValid"] is True

    def test_submit_rejected_batch(self, tmp_path, monkeypatch, capsys, meter_rows):
        rows = _write(tmp_path / "rows.json", meter_rows)
        monkeypatch.setattr(sys, "argv", ["solar-telemetry", "submit", "--kind", "meter", rows])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1
        assert "Application failed" in capsys.readouterr().out

    def test_missing_rows_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            sys, "argv", ["solar-telemetry", "validate", "--kind", "meter", str(tmp_path / "none.json")]
        )
        with pytest.raises(SystemExit):
            cli.main()
