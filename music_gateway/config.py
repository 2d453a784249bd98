# ABOUTME: Configuration system for the music generation gateway with environment variable handling
# ABOUTME: Provides Settings singleton with validated pacing, retry, Vertex AI and server options

import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

DEFAULT_MODEL = "lyria-002"
DEFAULT_LOCATION = "us-central1"


class Settings:
    """
    Configuration settings for the music generation gateway.
    Singleton class that loads configuration from environment variables
    with validation and defaults.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        # Always re-initialize to pick up environment changes
        self._default_model = self._get_default_model()
        self._project = self._get_project()
        self._location = self._get_location()
        self._port = self._get_port()
        self._max_attempts = self._get_max_attempts()
        self._base_delay_ms = self._get_base_delay_ms()
        self._min_interval_ms = self._get_min_interval_ms()
        self._hard_cooldown_ms = self._get_hard_cooldown_ms()
        self._credentials_path = self._get_credentials_path()
        self._cors_allow_origins = self._get_cors_allow_origins()
        self._log_level = self._get_log_level()
        self._log_json = self._get_log_json()

    @classmethod
    def _reset_instance(cls):
        """Reset singleton instance for testing purposes only."""
        cls._instance = None

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        raw = os.getenv(name, str(default))
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}")

    def _get_default_model(self) -> str:
        """Get and validate VERTEX_MODEL environment variable."""
        model = os.getenv("VERTEX_MODEL", DEFAULT_MODEL).strip()
        if not model:
            raise ValueError("VERTEX_MODEL must not be empty")
        return model

    def _get_project(self) -> Optional[str]:
        """Get the Vertex project, falling back to GOOGLE_CLOUD_PROJECT."""
        project = os.getenv("VERTEX_PROJECT") or os.getenv("GOOGLE_CLOUD_PROJECT")
        return project.strip() if project and project.strip() else None

    def _get_location(self) -> str:
        location = os.getenv("VERTEX_LOCATION", DEFAULT_LOCATION).strip()
        if not location:
            raise ValueError("VERTEX_LOCATION must not be empty")
        return location

    def _get_port(self) -> int:
        """Get and validate PORT environment variable."""
        port = self._get_int("PORT", 3001)

        if not 0 < port < 65536:
            raise ValueError("PORT must be between 1 and 65535")

        return port

    def _get_max_attempts(self) -> int:
        """Get and validate MAX_ATTEMPTS environment variable."""
        max_attempts = self._get_int("MAX_ATTEMPTS", 1)

        if max_attempts < 1:
            raise ValueError("MAX_ATTEMPTS must be at least 1")

        return max_attempts

    def _get_base_delay_ms(self) -> int:
        """Get and validate BASE_DELAY_MS environment variable."""
        base_delay_ms = self._get_int("BASE_DELAY_MS", 1200)

        if base_delay_ms < 200:
            raise ValueError("BASE_DELAY_MS must be at least 200")

        return base_delay_ms

    def _get_min_interval_ms(self) -> int:
        """Get and validate MIN_INTERVAL_MS environment variable."""
        min_interval_ms = self._get_int("MIN_INTERVAL_MS", 2000)

        if min_interval_ms < 0:
            raise ValueError("MIN_INTERVAL_MS must not be negative")

        return min_interval_ms

    def _get_hard_cooldown_ms(self) -> int:
        """Get and validate HARD_COOLDOWN_MS environment variable."""
        hard_cooldown_ms = self._get_int("HARD_COOLDOWN_MS", 15000)

        if hard_cooldown_ms < 0:
            raise ValueError("HARD_COOLDOWN_MS must not be negative")

        return hard_cooldown_ms

    def _get_credentials_path(self) -> Optional[str]:
        return os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None

    def _get_cors_allow_origins(self) -> List[str]:
        """Parse comma-separated CORS_ALLOW_ORIGINS environment variable."""
        origins_str = os.getenv("CORS_ALLOW_ORIGINS", "*")

        if not origins_str.strip():
            return []

        return [origin.strip() for origin in origins_str.split(",") if origin.strip()]

    def _get_log_level(self) -> Literal["debug", "info", "warning", "error", "critical"]:
        """Get and validate LOG_LEVEL environment variable."""
        log_level = os.getenv("LOG_LEVEL", "info").lower()

        valid_levels = ["debug", "info", "warning", "error", "critical"]

        if log_level not in valid_levels:
            raise ValueError(
                f"Invalid log level: {log_level}. "
                f"Valid levels: {', '.join(valid_levels)}"
            )

        return log_level

    def _get_log_json(self) -> bool:
        return os.getenv("LOG_JSON", "true").strip().lower() not in ("0", "false", "no", "off")

    # Properties to provide immutable access
    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def project(self) -> Optional[str]:
        return self._project

    @property
    def location(self) -> str:
        return self._location

    @property
    def port(self) -> int:
        return self._port

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def base_delay_ms(self) -> int:
        return self._base_delay_ms

    @property
    def min_interval_ms(self) -> int:
        return self._min_interval_ms

    @property
    def hard_cooldown_ms(self) -> int:
        return self._hard_cooldown_ms

    @property
    def credentials_path(self) -> Optional[str]:
        return self._credentials_path

    @property
    def credentials_file_exists(self) -> bool:
        # Checked on every access; the file may appear after startup
        return bool(self._credentials_path) and Path(self._credentials_path).exists()

    @property
    def cors_allow_origins(self) -> List[str]:
        return self._cors_allow_origins.copy()  # Return copy to prevent mutation

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def log_json(self) -> bool:
        return self._log_json


# Global function to get settings instance
def get_settings() -> Settings:
    """Get the global settings instance."""
    return Settings()
