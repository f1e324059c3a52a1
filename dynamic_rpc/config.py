"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Process settings only: the presence content itself lives in the SettingsStore
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - DYNAMIC_RPC_ prefix keeps the variables from clashing with the host's
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="DYNAMIC_RPC_", case_sensitive=False,
    )

    # Discord
    discord_api_base: str = "https://discord.com/api/v9"
    discord_token: str | None = None
    asset_timeout_seconds: float = 10.0

    # Presence
    socket_id: str = "CustomRPC"
    settings_file: str | None = None
    autostart: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
