"""Unit tests for Settings module."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from training_form.exceptions import ConfigurationError
from training_form.models import FormZone, TaperStrategy
from training_form.settings import Settings, load_settings


class TestSettingsBasicLoading:
    """Test basic settings loading from different sources."""

    def test_load_from_env_vars(self, monkeypatch):
        """Test that settings are correctly loaded from environment variables."""
        monkeypatch.setenv("TRAINING_FORM_CTL_DAYS", "35")
        monkeypatch.setenv("TRAINING_FORM_ATL_DAYS", "5")
        monkeypatch.setenv("TRAINING_FORM_HEART_RATE__MAX_HR", "190")

        settings = load_settings()

        assert settings.ctl_days == 35
        assert settings.atl_days == 5
        assert settings.heart_rate.max_hr == 190

    def test_load_from_yaml(self, sample_config_file: Path):
        """Test that settings are correctly loaded from a YAML file."""
        settings = load_settings(config_file=sample_config_file)

        assert settings.heart_rate.resting_hr == 48
        assert settings.heart_rate.threshold_hr == 172
        assert settings.history_days == 60
        assert settings.taper.duration_days == 10
        assert settings.taper.strategy == TaperStrategy.LINEAR

    def test_yaml_overrides_env_vars(self, monkeypatch, temp_config_file: Path):
        """Test that YAML settings override environment variables."""
        monkeypatch.setenv("TRAINING_FORM_CTL_DAYS", "35")

        with open(temp_config_file, "w") as f:
            yaml.dump({"ctl_days": 42}, f)

        settings = load_settings(config_file=temp_config_file)

        assert settings.ctl_days == 42

    def test_default_values(self):
        """Test that settings use default values when no config is provided."""
        settings = Settings()

        assert settings.ctl_days == 42
        assert settings.atl_days == 7
        assert settings.history_days == 90
        assert settings.heart_rate.resting_hr == 50
        assert settings.heart_rate.max_hr == 185
        assert settings.heart_rate.threshold_hr is None
        assert settings.taper.target_tsb == 17
        assert settings.taper.strategy == TaperStrategy.EXPONENTIAL
        assert settings.data_dir == Path("data")
        assert settings.prior_snapshot_file is None


class TestSettingsPathResolution:
    """Test path resolution and handling."""

    def test_relative_paths_resolved(self, temp_config_file: Path):
        """Test that relative paths are joined onto the resolved data_dir."""
        config_data = {
            "data_dir": "test_data",
            "activities_file": "activities.csv",
            "prior_snapshot_file": "snapshots.json",
        }
        with open(temp_config_file, "w") as f:
            yaml.dump(config_data, f)

        settings = load_settings(config_file=temp_config_file)

        assert settings.activities_file.is_absolute()
        assert settings.activities_file == temp_config_file.parent / "test_data" / "activities.csv"
        assert settings.prior_snapshot_file == (
            temp_config_file.parent / "test_data" / "snapshots.json"
        )

    def test_absolute_paths_preserved(self, temp_config_file: Path, tmp_path: Path):
        """Test that absolute paths are preserved."""
        abs_data_dir = tmp_path / "absolute_data"
        abs_data_dir.mkdir()

        config_data = {
            "data_dir": str(abs_data_dir),
            "activities_file": str(abs_data_dir / "activities.csv"),
        }
        with open(temp_config_file, "w") as f:
            yaml.dump(config_data, f)

        settings = load_settings(config_file=temp_config_file)

        assert settings.data_dir == abs_data_dir
        assert settings.activities_file == abs_data_dir / "activities.csv"

    def test_empty_config_file(self, temp_config_file: Path):
        """Test that an empty config file falls back to defaults."""
        temp_config_file.write_text("")

        settings = load_settings(config_file=temp_config_file)

        assert settings.ctl_days == 42
        assert settings.data_dir == temp_config_file.parent

    def test_non_mapping_config_rejected(self, temp_config_file: Path):
        """Test that a YAML list is reported as a configuration error."""
        temp_config_file.write_text("- ctl_days\n- atl_days\n")

        with pytest.raises(ConfigurationError):
            load_settings(config_file=temp_config_file)


class TestSettingsValidation:
    """Test settings validation and constraints."""

    @pytest.mark.parametrize("field", ["ctl_days", "atl_days"])
    def test_time_constants_must_be_positive(self, field: str):
        """Test that non-positive filter time constants are rejected."""
        with pytest.raises(PydanticValidationError):
            Settings(**{field: 0})

    @pytest.mark.parametrize("history_days", [6, 366])
    def test_history_days_bounds(self, history_days: int):
        """Test that the analysis window must be between 7 and 365 days."""
        with pytest.raises(PydanticValidationError):
            Settings(history_days=history_days)

    def test_implausible_heart_rate_rejected(self):
        """Test that heart rates outside 20-250 bpm are rejected."""
        with pytest.raises(PydanticValidationError):
            Settings(heart_rate={"max_hr": 300})

    def test_taper_duration_bounds(self):
        """Test that the default taper length must be 1-42 days."""
        with pytest.raises(PydanticValidationError):
            Settings(taper={"duration_days": 50})

    def test_taper_volume_reduction_bounds(self):
        """Test that the default volume reduction must be a percentage."""
        with pytest.raises(PydanticValidationError):
            Settings(taper={"volume_reduction": 120})


class TestSettingsZoneConfiguration:
    """Test zone override handling."""

    def test_no_overrides_by_default(self):
        """Test that no zone overrides are configured by default."""
        settings = Settings()

        assert settings.zone_overrides == {}
        assert settings.zone_override_ranges == {}

    def test_zone_override_from_yaml(self, temp_config_file: Path):
        """Test that zone overrides are loaded from YAML."""
        config_data = {
            "zone_overrides": {
                "optimal_race": {"min": 5, "max": 20},
                "fresh": {"min": 20},
            },
        }
        with open(temp_config_file, "w") as f:
            yaml.dump(config_data, f)

        settings = load_settings(config_file=temp_config_file)

        assert settings.zone_override_ranges[FormZone.OPTIMAL_RACE] == (5, 20)
        assert settings.zone_override_ranges[FormZone.FRESH] == (20, float("inf"))

    def test_inverted_zone_override_rejected(self):
        """Test that an override with max <= min is rejected."""
        with pytest.raises(PydanticValidationError):
            Settings(zone_overrides={"maintenance": {"min": 10, "max": 0}})
