"""Bot settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Central configuration, sourced from env vars or the .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Credentials ─────────────────────────────────────────────────────────
    farm_email: str = ""
    farm_password: str = ""
    phpsessid: str = ""

    # ── Game API ────────────────────────────────────────────────────────────
    farm_base_url: str = "https://farm-app.trophyapi.com"
    request_timeout_seconds: float = 15.0

    # ── Automation ──────────────────────────────────────────────────────────
    check_interval_ms: int = 60000
    silo_sell_threshold: float = 90
    sell_delay_ms: int = 500
    harvest_cooldown_hours: float = 6
    auto_start: bool = True

    # ── Observability ───────────────────────────────────────────────────────
    debug: bool = False
    log_level: str = "info"
    log_format: LogFormat = LogFormat.console

    @property
    def has_login_credentials(self) -> bool:
        return bool(self.farm_email and self.farm_password)


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
