"""
Configuration module for solar telemetry processing.

Loads configuration from JSON file and environment variables.
"""

import json
import os
from typing import Dict, Any, Optional
from pathlib import Path

from . import constants


class Config:
    """Configuration manager for the application."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration JSON file. If None, uses CONFIG_FILE env var
                        or defaults to 'config.json'
        """
        self.config_file = config_file or os.getenv("CONFIG_FILE", "config.json")
        self.config: Dict[str, Any] = {}
        self._load_config()
        self._override_from_env()
        self._validate_config()

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        with open(config_path, "r", encoding="utf-8") as f:
            self.config = json.load(f)

    def _override_from_env(self) -> None:
        """Override configuration with environment variables."""
        if os.getenv("WEATHER_API_URL"):
            self.config.setdefault("weather_api", {})
            self.config["weather_api"]["base_url"] = os.getenv("WEATHER_API_URL")

        if os.getenv("GENERATION_API_URL"):
            self.config.setdefault("generation_api", {})
            self.config["generation_api"]["base_url"] = os.getenv("GENERATION_API_URL")

        if os.getenv("PROCESSING_TIMEZONE"):
            self.config.setdefault("processing", {})
            self.config["processing"]["timezone"] = os.getenv("PROCESSING_TIMEZONE")

        if os.getenv("ENVIRONMENT"):
            self.config["environment"] = os.getenv("ENVIRONMENT")

    def _validate_config(self) -> None:
        """Validate that required configuration keys are present and sane."""
        required_config = {
            "processing": ["timezone"],
        }

        missing_sections = [s for s in required_config if s not in self.config]
        if missing_sections:
            raise ValueError(
                f"Missing required configuration sections: {', '.join(missing_sections)}"
            )

        missing_keys = []
        for section, keys in required_config.items():
            for key in keys:
                if key not in self.config[section]:
                    missing_keys.append(f"{section}.{key}")

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}"
            )

        if self.poa_start_threshold < 0:
            raise ValueError("processing.poa_start_threshold must be >= 0")

        if self.poa_stop_upper <= constants.POA_STOP_LOWER:
            raise ValueError(
                f"processing.poa_stop_upper must be greater than {constants.POA_STOP_LOWER}"
            )

        if self.sync_enabled and not self.generation_api_url:
            raise ValueError("sync.enabled requires generation_api.base_url")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation).

        Args:
            key: Configuration key (e.g., 'processing.timezone')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    @property
    def timezone(self) -> str:
        """Get timezone used to localize calendar dates."""
        return self.get("processing.timezone", "UTC")

    @property
    def poa_start_threshold(self) -> float:
        """Get POA level (W/m²) at which the plant is considered started."""
        return float(self.get("processing.poa_start_threshold", constants.POA_START_THRESHOLD))

    @property
    def poa_stop_upper(self) -> float:
        """Get upper bound (W/m²) of the POA band used to find the stop time."""
        return float(self.get("processing.poa_stop_upper", constants.POA_STOP_UPPER))

    @property
    def parallel_weather_fetch(self) -> bool:
        """Check if weather should be fetched per date in parallel."""
        return self.get("processing.parallel_weather_fetch", False)

    @property
    def api_timeout(self) -> int:
        """Get API timeout in seconds."""
        return self.get("api.timeout", 30)

    @property
    def api_max_retries(self) -> int:
        """Get maximum API retry attempts."""
        return self.get("api.max_retries", 3)

    @property
    def api_verify_ssl(self) -> bool:
        """Get API SSL verification setting."""
        return self.get("api.verify_ssl", True)

    @property
    def weather_api_url(self) -> Optional[str]:
        """Get base URL of the remote weather store, if any."""
        return self.get("weather_api.base_url")

    @property
    def generation_api_url(self) -> Optional[str]:
        """Get base URL of the daily generation service, if any."""
        return self.get("generation_api.base_url")

    @property
    def sync_enabled(self) -> bool:
        """Check if submitted meter data is synced to daily generation."""
        return self.get("sync.enabled", False)

    @property
    def log_level(self) -> str:
        """Get logging level."""
        return self.get("logging.level", "INFO")

    @property
    def log_file(self) -> Optional[str]:
        """Get log file path."""
        return self.get("logging.file")

    def __repr__(self) -> str:
        return f"Config(file={self.config_file}, env={self.get('environment')})"
