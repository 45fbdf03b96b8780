# commandsync/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Paths default to the current user's home so the same binary works on any
host; tests point them at temporary directories instead.
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Filesystem roots
    home_dir: Path = Path.home()
    applications_dir: Path = Path("/Applications")

    # Backups
    backup_dir: Path = Path.home() / ".commandsync" / "backups"
    backup_keep_count: int = 10

    # Sync engine defaults (comma separated service list)
    enabled_services: str = "claude,cursor,windsurf"
    sync_strategy: str = "manual"
    conflict_resolution: str = "newer_wins"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # API Security
    api_auth_key: str = ""  # Empty restricts the API to loopback clients
    api_rate_limit: int = 120  # Requests per minute

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("backup_keep_count")
    @classmethod
    def _keep_at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("backup_keep_count must be at least 1")
        return value

    @property
    def enabled_service_names(self) -> list[str]:
        """Get the enabled services as a list of raw names.

        Returns:
            Lowercased, stripped service names with empties removed.
        """
        return [
            name.strip().lower()
            for name in self.enabled_services.split(",")
            if name.strip()
        ]


# Singleton instance - import this in your code
settings = Settings()
