"""Bot configuration loaded from config.yaml.

Supports:
- Telegram credentials inline or via environment variable names
- Weekly or daily report schedule in any IANA timezone
- Delivery tuning (send attempts, long-poll window, poll retry delay)
- Strategy bands and placeholder values for indicators without a data feed
"""

import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from sentinel_core.models import StrategyConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "/advice"
DEFAULT_ACK_TEXT = "⏳ Fetching live data, please wait..."


class TelegramConfig(BaseModel):
    """Telegram bot credentials and the single recipient."""

    bot_token: str = ""
    chat_id: str = ""
    bot_token_env: str = "TELEGRAM_BOT_TOKEN"
    chat_id_env: str = "TELEGRAM_CHAT_ID"
    command: str = DEFAULT_COMMAND
    ack_text: str = DEFAULT_ACK_TEXT

    @field_validator("chat_id", mode="before")
    @classmethod
    def _chat_id_as_str(cls, value):
        # YAML reads numeric chat ids as int
        return str(value) if value is not None else ""

    @model_validator(mode="after")
    def _resolve(self):
        if not self.bot_token and self.bot_token_env:
            self.bot_token = os.environ.get(self.bot_token_env, "")
        if not self.chat_id and self.chat_id_env:
            self.chat_id = os.environ.get(self.chat_id_env, "")
        if not self.bot_token:
            raise ValueError(
                f"telegram.bot_token is required (or set {self.bot_token_env})"
            )
        if not self.chat_id:
            raise ValueError(f"telegram.chat_id is required (or set {self.chat_id_env})")
        if not self.command:
            raise ValueError("telegram.command must not be empty")
        return self


class ScheduleConfig(BaseModel):
    """When the report cycle fires. weekday=None means every day."""

    weekday: int | None = Field(default=0, ge=0, le=6)  # 0 = Monday
    hour: int = Field(default=9, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone '{value}'")
        return value


class DeliveryConfig(BaseModel):
    """Outbound retry and inbound long-poll tuning (seconds)."""

    max_attempts: int = Field(default=3, ge=1)
    poll_timeout: int = Field(default=30, ge=0)
    retry_delay: float = Field(default=5.0, ge=0)


class CollectorConfig(BaseModel):
    """Placeholder inputs for indicators that have no live feed yet."""

    mvrv_z_score: float = 2.5
    pi_cycle_top: bool = False

    # 2-year MA multiplier state from BTC price
    bear_bottom_below: float = 20000.0
    bull_top_above: float = 150000.0

    # ETH regression zone from ETH price
    eth_lower_below: float = 2000.0
    eth_upper_above: float = 5000.0


class BotConfig(BaseModel):
    """Top-level config.yaml configuration."""

    telegram: TelegramConfig
    schedule: ScheduleConfig = ScheduleConfig()
    delivery: DeliveryConfig = DeliveryConfig()
    strategy: StrategyConfig = StrategyConfig()
    collector: CollectorConfig = CollectorConfig()


_DEFAULT_PATH = Path(__file__).parent.parent / "config.yaml"


def load_bot_config(path: Path | str | None = None) -> BotConfig:
    """Load bot config from a YAML file.

    A missing file is allowed when the Telegram credentials come from
    the environment; everything else falls back to defaults.
    """
    config_path = Path(path) if path else _DEFAULT_PATH

    # Load .env into os.environ so TelegramConfig can resolve *_env names
    env_path = config_path.parent / ".env"
    load_dotenv(env_path, override=False)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        logger.info("No config file found at %s, using defaults", config_path)
        raw = {}

    # An empty `telegram:` key loads as None
    raw["telegram"] = raw.get("telegram") or {}
    config = BotConfig(**raw)
    weekday = config.schedule.weekday
    logger.info(
        "Loaded bot config: schedule=%s %02d:%02d %s, max_attempts=%d, command=%s",
        "daily" if weekday is None else f"weekday {weekday}",
        config.schedule.hour,
        config.schedule.minute,
        config.schedule.timezone,
        config.delivery.max_attempts,
        config.telegram.command,
    )
    return config
