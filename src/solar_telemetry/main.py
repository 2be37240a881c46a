"""
Main entry point for solar telemetry processing.

Validates and submits weather and meter batches given as JSON row files.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core import Config, setup_logger
from .api import DailyGenerationAPI, WeatherStoreAPI
from .models import ValidationBatchResult
from .services import BatchPipeline, DailyGenerationSync, UploadBatch
from .storage import InMemoryMeterStore, InMemoryWeatherStore

KINDS = ("weather", "meter")


def load_rows(path: str) -> List[Dict[str, Any]]:
    """
    Load parsed sheet rows from a JSON file.

    The file holds either a list of row objects or an object with a "rows" list.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the content is not a list of rows
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("rows")
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of rows")
    return data


class SolarTelemetryApp:
    """Command line application for solar telemetry batches."""

    def __init__(self, config_file: Optional[str] = None, weather_file: Optional[str] = None):
        """
        Initialize application.

        Args:
            config_file: Path to configuration file. Without one, CONFIG_FILE or
                config.json is used when present, otherwise built-in defaults.
            weather_file: JSON file of weather rows to correlate meter rows with.
                Takes precedence over the configured weather service.
        """
        default_config = os.getenv("CONFIG_FILE", "config.json")
        self.config: Optional[Config] = None
        if config_file or Path(default_config).exists():
            self.config = Config(config_file)

        if self.config is not None:
            self.logger = setup_logger(log_file=self.config.log_file, log_level=self.config.log_level)
        else:
            self.logger = setup_logger()

        self.logger.info("=" * 60)
        self.logger.info("Solar Telemetry Processing")
        self.logger.info("=" * 60)
        if self.config is not None:
            self.logger.info(f"Configuration: {self.config}")

        self.weather_store = InMemoryWeatherStore(self.logger)
        self.meter_store = InMemoryMeterStore(self.logger)
        self.weather_api: Optional[WeatherStoreAPI] = None
        self.generation_api: Optional[DailyGenerationAPI] = None

        self.pipeline = self._build_pipeline(use_weather_api=not weather_file)

        if weather_file:
            result = self.pipeline.submit_weather(load_rows(weather_file))
            self.logger.info(f"Loaded weather file {weather_file}: {result.to_dict()}")

    def _api_kwargs(self) -> Dict[str, Any]:
        return {
            "timeout": self.config.api_timeout,
            "max_retries": self.config.api_max_retries,
            "verify_ssl": self.config.api_verify_ssl,
            "api_key": self.config.get("api.key"),
            "logger": self.logger,
        }

    def _build_pipeline(self, use_weather_api: bool = True) -> BatchPipeline:
        """
        Initialize stores, remote services and the batch pipeline.

        Args:
            use_weather_api: Correlate meter rows against the configured weather
                service. When False the local weather store is used.
        """
        weather_source = None
        sync = None

        if self.config is not None:
            if self.config.weather_api_url and not use_weather_api:
                self.logger.info("Weather file given, ignoring the configured weather service")
            elif self.config.weather_api_url:
                self.weather_api = WeatherStoreAPI(self.config.weather_api_url, **self._api_kwargs())
                weather_source = self.weather_api

            if self.config.sync_enabled:
                self.generation_api = DailyGenerationAPI(self.config.generation_api_url, **self._api_kwargs())
                sync = DailyGenerationSync(
                    self.meter_store, self.generation_api, timezone=self.config.timezone, logger=self.logger
                )

        return BatchPipeline(
            weather_store=self.weather_store,
            meter_store=self.meter_store,
            weather_source=weather_source,
            sync=sync,
            config=self.config,
            logger=self.logger,
        )

    def new_batch(self, kind: str, rows: List[Dict[str, Any]]) -> UploadBatch:
        if kind == "weather":
            return self.pipeline.weather_batch(rows)
        if kind == "meter":
            return self.pipeline.meter_batch(rows)
        raise ValueError(f"Unknown batch kind: {kind}")

    def validate(self, kind: str, rows: List[Dict[str, Any]]) -> ValidationBatchResult:
        """Validate a batch and return the result."""
        batch = self.new_batch(kind, rows)
        result = batch.validate()
        self.logger.info(f"{kind} batch: {len(result.rows)} rows, {len(result.errors)} with errors")
        return result

    def submit(self, kind: str, rows: List[Dict[str, Any]], valid_only: bool = False) -> Dict[str, Any]:
        """
        Validate and submit a batch.

        Returns:
            Dictionary with the validation result and the submission counts
        """
        batch = self.new_batch(kind, rows)
        validation = batch.validate()
        submission = batch.submit(valid_only=valid_only)
        return {"validation": validation.to_dict(), "submission": submission.to_dict()}

    def close(self) -> None:
        """Close remote sessions."""
        for client in (self.weather_api, self.generation_api):
            if client is not None:
                client.close()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Solar plant telemetry validation and submission"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (("validate", "Validate a batch"), ("submit", "Validate and submit a batch")):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("rows", type=str, help="JSON file with the parsed sheet rows")
        sub.add_argument("--kind", choices=KINDS, required=True, help="Sheet kind")
        sub.add_argument(
            "--weather",
            type=str,
            default=None,
            help="JSON file with weather rows used to correlate meter rows"
        )
        if command == "submit":
            sub.add_argument(
                "--valid-only",
                action="store_true",
                help="Submit the valid rows of a batch that has errors"
            )

    args = parser.parse_args()

    app = None
    try:
        app = SolarTelemetryApp(config_file=args.config, weather_file=args.weather)
        rows = load_rows(args.rows)

        if args.command == "validate":
            result = app.validate(args.kind, rows)
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
            if not result.is_valid:
                sys.exit(1)
        else:
            output = app.submit(args.kind, rows, valid_only=args.valid_only)
            print(json.dumps(output, indent=2, ensure_ascii=False))

    except (OSError, ValueError, RuntimeError) as e:
        print(f"Application failed: {e}")
        sys.exit(1)
    finally:
        if app is not None:
            app.close()


if __name__ == "__main__":
    main()
