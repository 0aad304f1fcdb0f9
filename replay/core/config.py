"""Replay configuration via Pydantic Settings.

Environment-driven configuration for:
- Historical data location (CSV directory)
- Load behaviour (sort on load)
- Logging level
- Telemetry endpoint (OpenTelemetry)

All settings can be overridden via environment variables or .env file.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # --- App Info ---
    PROJECT_NAME: str = "Replay Buffer"
    VERSION: str = "0.3.0"
    ENV: str = "DEV"  # DEV, PROD
    DEBUG: bool = False

    # --- Historical Data ---
    DATA_DIR: str = "data"  # one <SYMBOL>.csv per symbol
    SORT_ON_LOAD: bool = True

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Telemetry ---
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str):
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


settings = Settings()
