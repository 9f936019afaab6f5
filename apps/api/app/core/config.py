"""Application configuration using Pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API
    project_name: str = "REVANX Coming Soon"
    brand_name: str = "REVANX"
    api_prefix: str = ""
    version: str = "0.1.0"

    # Email
    email_provider: str = "resend"
    email_api_key: str = ""
    email_from: str = "noreply@revanx.com"
    email_to: str = "hello@revanx.com"
    email_timeout_seconds: float = 15.0

    # Storage
    storage_mode: str = "json"
    data_dir: Path = Path("data")
    signups_file: str = "signups.json"
    lock_file: str = "signups.lock"
    lock_attempts: int = 10
    lock_retry_delay_seconds: float = 0.1

    # Rate limiting (per client address)
    rate_limit_max: int = 5
    rate_limit_window_seconds: int = 15 * 60

    # CORS
    cors_origins: list[str] = ["*"]

    # Serverless functions can only write under /tmp
    function_data_dir: Path = Path("/tmp/revanx-data")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dry_run(self) -> bool:
        """Emails are logged instead of sent when no provider key is configured."""
        return not self.email_api_key

    @property
    def signups_path(self) -> Path:
        return self.data_dir / self.signups_file

    @property
    def lock_path(self) -> Path:
        return self.data_dir / self.lock_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
