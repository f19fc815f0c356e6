"""Configuration management for Fulfillment Profit Calculator."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import FulfillmentMode, SeasonWindow
from .schedule import FeeScheduleConfig, load_schedule

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return Path.home() / ".fulfillment-profit-calculator"


def get_log_dir() -> Path:
    """Get the log directory path."""
    log_dir = get_config_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


class MetricTargets(BaseModel):
    """Seller's minimum goals for a product to be worth buying."""

    min_profit: Decimal = Decimal("0")
    min_margin: Decimal = Decimal("0")  # Percent
    min_roi: Decimal = Decimal("0")  # Percent


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=str(get_config_dir() / ".env"),
        env_file_encoding="utf-8",
        env_prefix="PFC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Fee schedule JSON; None uses the built-in schedule
    schedule_path: Path | None = None

    # Defaults for new product views
    fulfillment_mode: FulfillmentMode = FulfillmentMode.PLATFORM_FULFILLED
    season: SeasonWindow = SeasonWindow.STANDARD
    storage_months: Decimal = Field(default=Decimal("1"), ge=0)
    starting_cost_divisor: Decimal = Field(default=Decimal("3"), gt=0)

    # Goals shown next to profit, margin and ROI
    targets: MetricTargets = Field(default_factory=MetricTargets)

    log_level: str = "INFO"

    def load_schedule(self) -> FeeScheduleConfig:
        """Load the configured fee schedule."""
        return load_schedule(self.schedule_path)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from the config file or create defaults."""
        config_path = get_config_dir() / "settings.json"

        settings = cls()

        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    data = json.load(f)
                settings = cls.model_validate(data)
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Ignoring unreadable settings file {config_path}: {e}")

        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings
