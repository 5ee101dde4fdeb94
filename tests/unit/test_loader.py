"""Unit tests for activity and seed loading."""

import json
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

from training_form.data import ActivityDataLoader
from training_form.exceptions import DataLoadError
from training_form.models import LoadSeed
from training_form.settings import Settings


@pytest.fixture
def loader(settings: Settings) -> ActivityDataLoader:
    """Provide a loader with default settings."""
    return ActivityDataLoader(settings)


class TestLoadActivities:
    """Test CSV and JSON activity loading."""

    def test_load_csv(self, loader: ActivityDataLoader, tmp_path: Path, sample_activity_rows):
        """Test that a semicolon-separated export maps onto ActivityRecord."""
        path = tmp_path / "activities.csv"
        pd.DataFrame(sample_activity_rows).to_csv(path, sep=";", index=False)

        records = loader.load_activities(path)

        assert len(records) == 2
        assert records[0].activity_id == 101
        assert records[0].activity_name == "Morning Run"
        assert records[0].start_time == datetime(2024, 3, 1, 7, 0)
        assert records[0].duration_seconds == 3600
        assert records[0].average_hr == 150
        assert records[1].activity_type == "cycling"
        assert records[1].average_hr is None

    def test_load_json_list(self, loader: ActivityDataLoader, tmp_path: Path, sample_activity_rows):
        path = tmp_path / "activities.json"
        path.write_text(json.dumps(sample_activity_rows))

        records = loader.load_activities(path)

        assert [r.activity_id for r in records] == [101, 102]
        assert records[0].max_hr == 172

    def test_load_json_object_with_nested_type(self, loader: ActivityDataLoader, tmp_path: Path):
        """Test the wrapped export format with a nested activity type."""
        payload = {
            "activities": [
                {
                    "activityId": 7,
                    "activityName": "Track Session",
                    "activityType": {"typeKey": "running"},
                    "startTimeLocal": "2024-03-05 06:15:00",
                    "duration": 2700,
                    "averageHR": 162,
                }
            ]
        }
        path = tmp_path / "activities.json"
        path.write_text(json.dumps(payload))

        records = loader.load_activities(path)

        assert records[0].activity_id == 7
        assert records[0].activity_type == "running"
        assert records[0].average_hr == 162

    def test_missing_fields_use_defaults(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "activities.json"
        path.write_text(json.dumps([{"start_date_local": "2024-03-01T07:00:00"}]))

        record = loader.load_activities(path)[0]

        assert record.activity_id == 0
        assert record.activity_name == "Unnamed Activity"
        assert record.activity_type == "unknown"
        assert record.duration_seconds == 0

    def test_invalid_rows_skipped(self, loader: ActivityDataLoader, tmp_path: Path, sample_activity_rows):
        """Test that malformed records are skipped while the rest still load."""
        rows = sample_activity_rows + [{"id": 103, "name": "No start"}, "not an object"]
        path = tmp_path / "activities.json"
        path.write_text(json.dumps(rows))

        records = loader.load_activities(path)

        assert [r.activity_id for r in records] == [101, 102]

    def test_default_path_from_settings(self, tmp_path: Path, sample_activity_rows):
        path = tmp_path / "export.json"
        path.write_text(json.dumps(sample_activity_rows))
        loader = ActivityDataLoader(Settings(activities_file=path))

        assert len(loader.load_activities()) == 2

    def test_missing_file(self, loader: ActivityDataLoader, tmp_path: Path):
        with pytest.raises(DataLoadError):
            loader.load_activities(tmp_path / "missing.csv")

    def test_unparseable_json(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "activities.json"
        path.write_text("{not json")

        with pytest.raises(DataLoadError):
            loader.load_activities(path)


class TestLoadSeed:
    """Test carry-in seed loading."""

    def test_no_seed_configured(self, loader: ActivityDataLoader):
        assert loader.load_seed() is None

    def test_seed_object(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"ctl": 55.2, "atl": 61.8}))

        assert loader.load_seed(path) == LoadSeed(ctl=55.2, atl=61.8)

    def test_seed_from_last_snapshot(self, loader: ActivityDataLoader, tmp_path: Path):
        """Test that the last entry of a prior snapshot list is used."""
        path = tmp_path / "snapshots.json"
        path.write_text(
            json.dumps(
                {
                    "snapshots": [
                        {"date": "2024-02-28", "ctl": 40, "atl": 45, "tsb": -5},
                        {"date": "2024-02-29", "ctl": 41.5, "atl": 50.1, "tsb": -8.6},
                    ]
                }
            )
        )

        assert loader.load_seed(path) == LoadSeed(ctl=41.5, atl=50.1, date=date(2024, 2, 29))

    def test_seed_with_invalid_date(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"ctl": 40, "atl": 45, "date": "2024-02-30"}))

        with pytest.raises(DataLoadError):
            loader.load_seed(path)

    def test_seed_from_settings(self, tmp_path: Path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps([{"ctl": 30, "atl": 20}]))
        loader = ActivityDataLoader(Settings(prior_snapshot_file=path))

        assert loader.load_seed() == LoadSeed(ctl=30, atl=20)

    def test_seed_without_load_values(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"fitness": 30}))

        with pytest.raises(DataLoadError):
            loader.load_seed(path)

    def test_missing_seed_file(self, loader: ActivityDataLoader, tmp_path: Path):
        with pytest.raises(DataLoadError):
            loader.load_seed(tmp_path / "missing.json")


class TestLoadPerformanceRecords:
    """Test personal record loading."""

    def test_load_json(self, loader: ActivityDataLoader, tmp_path: Path):
        """Test that malformed rows are skipped and improvement is optional."""
        path = tmp_path / "records.json"
        path.write_text(
            json.dumps(
                {
                    "records": [
                        {"date": "2024-03-02", "category": "5k", "improvement": 2.5},
                        {"date": "2024-03-09", "category": "10k"},
                        {"category": "half_marathon"},
                    ]
                }
            )
        )

        records = loader.load_performance_records(path)

        assert [r.date for r in records] == [date(2024, 3, 2), date(2024, 3, 9)]
        assert records[0].improvement == 2.5
        assert records[1].improvement is None

    def test_load_csv(self, loader: ActivityDataLoader, tmp_path: Path):
        path = tmp_path / "records.csv"
        pd.DataFrame(
            [
                {"date": "2024-03-02", "category": "5k", "improvement": 2.5},
                {"date": "2024-03-09", "category": "10k", "improvement": None},
            ]
        ).to_csv(path, sep=";", index=False)

        records = loader.load_performance_records(path)

        assert [r.category for r in records] == ["5k", "10k"]
        assert records[1].improvement is None

    def test_missing_file(self, loader: ActivityDataLoader, tmp_path: Path):
        with pytest.raises(DataLoadError):
            loader.load_performance_records(tmp_path / "missing.json")
