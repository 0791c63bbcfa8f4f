"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Path to the bot YAML config
    config_path: str = "config.yaml"

    # Current account leverage, supplied by the operator
    leverage: float = Field(default=1.0, ge=0)

    # Outbound proxy for Telegram and Binance
    https_proxy: str = ""
    http_proxy: str = ""

    # Run one report cycle immediately at startup
    run_on_start: bool = False

    log_level: str = "INFO"

    @property
    def proxy_url(self) -> str | None:
        """Resolved proxy URL, HTTPS_PROXY first. Bare host:port gets http://."""
        proxy = self.https_proxy or self.http_proxy
        if not proxy:
            return None
        if "://" not in proxy:
            proxy = f"http://{proxy}"
        return proxy


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
