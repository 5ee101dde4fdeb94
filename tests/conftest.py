"""
Shared pytest fixtures for Training Form tests.

This module provides reusable fixtures for:
- Settings configurations
- Activity records and load series
- Zone classifier and services
- Temporary data files
"""

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
import yaml

from training_form.analysis import FormZoneClassifier
from training_form.models import ActivityRecord, LoadState
from training_form.services import FormAnalysisService
from training_form.settings import Settings

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide default settings (resting HR 50, max HR 185, CTL 42 / ATL 7)."""
    return Settings()


@pytest.fixture
def settings_with_threshold() -> Settings:
    """Provide settings with an explicit threshold heart rate of 170bpm."""
    return Settings(heart_rate={"resting_hr": 50, "max_hr": 185, "threshold_hr": 170})


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary YAML config file path for testing."""
    return tmp_path / "config.yaml"


@pytest.fixture
def sample_config_dict() -> dict:
    """Provide a sample configuration dictionary."""
    return {
        "data_dir": "data",
        "activities_file": "activities.csv",
        "heart_rate": {"resting_hr": 48, "max_hr": 190, "threshold_hr": 172},
        "ctl_days": 42,
        "atl_days": 7,
        "history_days": 60,
        "taper": {"duration_days": 10, "strategy": "linear"},
    }


@pytest.fixture
def sample_config_file(tmp_path: Path, sample_config_dict: dict) -> Path:
    """Create a temporary config file with sample data."""
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)
    return config_path


# ============================================================================
# Analysis Fixtures
# ============================================================================


@pytest.fixture
def classifier(settings: Settings) -> FormZoneClassifier:
    """Provide a zone classifier with the canonical thresholds."""
    return FormZoneClassifier(settings)


@pytest.fixture
def form_service(settings: Settings) -> FormAnalysisService:
    """Provide a form analysis service with default settings."""
    return FormAnalysisService(settings)


@pytest.fixture
def fatigued_state() -> LoadState:
    """Provide a fatigued load state (CTL 60, ATL 90, TSB -30)."""
    return LoadState(ctl=60, atl=90)


# ============================================================================
# Data Fixtures - Activities
# ============================================================================


@pytest.fixture
def analysis_date() -> date:
    """Provide the fixed date used as 'today' in service tests."""
    return date(2024, 3, 31)


def make_record(
    day: date,
    activity_id: int = 1,
    duration_seconds: float = 3600,
    average_hr: float | None = None,
    activity_type: str = "running",
) -> ActivityRecord:
    """Build an activity record starting at 07:00 on ``day``."""
    return ActivityRecord(
        activity_id=activity_id,
        activity_name=f"Activity {activity_id}",
        activity_type=activity_type,
        start_time=datetime(day.year, day.month, day.day, 7, 0),
        duration_seconds=duration_seconds,
        average_hr=average_hr,
    )


@pytest.fixture
def daily_training_records(analysis_date: date) -> list[ActivityRecord]:
    """
    Provide 60 days of one-hour runs ending on the analysis date.

    Every third day is a rest day; training days carry an average HR of
    150bpm so they are scored from heart rate.
    """
    records = []
    for offset in range(60):
        day = analysis_date - timedelta(days=offset)
        if offset % 3 == 2:
            continue
        records.append(make_record(day, activity_id=offset + 1, average_hr=150))
    return records


@pytest.fixture
def sample_activity_rows() -> list[dict]:
    """Provide raw activity rows as exported by a fitness platform."""
    return [
        {
            "id": 101,
            "name": "Morning Run",
            "type": "running",
            "start_date_local": "2024-03-01T07:00:00",
            "moving_time": 3600,
            "average_heartrate": 150,
            "max_heartrate": 172,
        },
        {
            "id": 102,
            "name": "Easy Spin",
            "type": "cycling",
            "start_date_local": "2024-03-02T18:30:00",
            "moving_time": 5400,
        },
    ]


@pytest.fixture
def record_factory():
    """Provide the activity record builder to tests."""
    return make_record
