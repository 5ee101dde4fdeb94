"""Application settings and configuration management."""

from pathlib import Path

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import TrainingLoadWindows
from .exceptions import ConfigurationError
from .models import FormZone, HeartRateConfig, TaperConfig, ZoneOverride


class Settings(BaseSettings):
    """
    Application settings for Training Form.

    Settings are loaded in the following order of precedence (highest to lowest):
    1. Environment variables (e.g., TRAINING_FORM_CTL_DAYS)
    2. .env file (if found)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_FORM_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # --- File Paths ---
    data_dir: Path = Path("data")
    activities_file: Path = Path("activities.csv")
    prior_snapshot_file: Path | None = None  # Carry-in CTL/ATL from a prior run

    # --- Athlete Parameters ---
    heart_rate: HeartRateConfig = HeartRateConfig()

    # --- Load Filter Time Constants ---
    ctl_days: int = TrainingLoadWindows.CTL_DAYS
    atl_days: int = TrainingLoadWindows.ATL_DAYS

    # --- Analysis Window ---
    history_days: int = TrainingLoadWindows.DEFAULT_HISTORY_DAYS

    # --- Form Zones ---
    # Replaces the canonical (unscaled) TSB range of individual zones
    zone_overrides: dict[FormZone, ZoneOverride] = {}

    # --- Taper Defaults ---
    taper: TaperConfig = TaperConfig()

    @field_validator("ctl_days", "atl_days")
    @classmethod
    def check_time_constant(cls, v: int, info) -> int:
        """Validate that filter time constants are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be a positive number of days")
        return v

    @field_validator("history_days")
    @classmethod
    def check_history_days(cls, v: int) -> int:
        """Validate the analysis window length."""
        lower = TrainingLoadWindows.MIN_HISTORY_DAYS
        upper = TrainingLoadWindows.MAX_HISTORY_DAYS
        if not lower <= v <= upper:
            raise ValueError(f"history_days must be between {lower} and {upper}")
        return v

    @property
    def zone_override_ranges(self) -> dict[FormZone, tuple[float, float]]:
        """Zone overrides as plain ``(min, max)`` tuples."""
        return {zone: (o.min, o.max) for zone, o in self.zone_overrides.items()}


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from a YAML file, environment variables, and defaults."""
    if config_file:
        try:
            with open(config_file, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read config file {config_file}: {e}") from e

        if not isinstance(yaml_settings, dict):
            raise ConfigurationError(f"Config file {config_file} must contain a mapping")

        # Relative data_dir is taken relative to the config file
        data_dir = Path(yaml_settings.get("data_dir", "")).expanduser()
        if not data_dir.is_absolute():
            data_dir = config_file.parent / data_dir
        yaml_settings["data_dir"] = str(data_dir)

        # Join relative file paths with data_dir
        for key in ("activities_file", "prior_snapshot_file"):
            if yaml_settings.get(key) and not Path(yaml_settings[key]).is_absolute():
                yaml_settings[key] = str(data_dir / yaml_settings[key])

        return Settings(**yaml_settings)

    return Settings()
