"""Viewer configuration — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``DEPLOYLENS_*`` environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ViewerConfig(BaseSettings):
    """Runtime configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DEPLOYLENS_BUFFER_CAPACITY=2000
        export DEPLOYLENS_LOG_LEVEL=DEBUG
        export DEPLOYLENS_PREFERENCES_PATH=/data/prefs.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEPLOYLENS_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    log_level: str = "INFO"

    # Log buffer
    buffer_capacity: int = 500

    # Autoscroll
    autoscroll_threshold: float = 100.0
    preferences_path: Path = Path(".deploylens/preferences.json")

    # Terminal viewer
    refresh_hz: float = 4.0
    viewport_lines: int = 30

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Module-level singleton — import as `from deploylens.config import config`
config = ViewerConfig()
