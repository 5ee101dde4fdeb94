"""
Data loading functionality.

This module provides a clean interface for loading activity records from flat
files (CSV with ``;`` separator, or a JSON list) and carry-in load seeds from
a prior run.
"""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from ..constants import ActivityColumns, CSVConstants
from ..exceptions import DataLoadError
from ..models import ActivityRecord, LoadSeed, PerformanceRecord
from ..settings import Settings

logger = logging.getLogger(__name__)


class DataLoaderProtocol(Protocol):
    """Protocol for data loaders."""

    def load_activities(self, path: Path | None = None) -> list[ActivityRecord]:
        """Load activity records."""
        ...

    def load_seed(self, path: Path | None = None) -> LoadSeed | None:
        """Load a carry-in CTL/ATL seed."""
        ...


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """Map source column names onto ActivityRecord fields, dropping missing values."""
    record = {}
    for field, aliases in ActivityColumns.ALIASES.items():
        for alias in aliases:
            value = row.get(alias)
            if value is None or (not isinstance(value, (str, dict, list)) and pd.isna(value)):
                continue
            if isinstance(value, dict):
                # Nested type objects such as {"typeKey": "running"}
                value = value.get("typeKey")
                if value is None:
                    continue
            record[field] = value
            break
    return record


class ActivityDataLoader:
    """
    Handles loading of activity records and load seeds from files.

    Malformed individual records are logged and skipped so that partial
    data still flows; unreadable files raise DataLoadError.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the data loader.

        Args:
            settings: Application settings containing data paths
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

    def _read_rows(self, path: Path) -> list[dict[str, Any]]:
        if path.suffix.lower() == ".json":
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
            if isinstance(payload, dict):
                payload = payload.get("activities", [])
            if not isinstance(payload, list):
                raise DataLoadError(f"Expected a list of activities in {path}")
            return payload

        df = pd.read_csv(path, sep=CSVConstants.DEFAULT_SEPARATOR)
        # Plain Python scalars, with None for missing cells
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def load_activities(self, path: Path | None = None) -> list[ActivityRecord]:
        """
        Load activity records from CSV or JSON.

        Args:
            path: File to read (defaults to ``settings.activities_file``)

        Returns:
            Parsed activity records

        Raises:
            DataLoadError: If the file is missing or cannot be parsed
        """
        activities_file = Path(path or self.settings.activities_file)
        if not activities_file.exists():
            raise DataLoadError(f"Activities file not found: {activities_file}")

        self.logger.info(f"Loading activities from {activities_file}")
        try:
            rows = self._read_rows(activities_file)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            raise DataLoadError(f"Failed to load activities: {e}") from e

        records = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                self.logger.warning(f"Skipping activity #{index}: not an object")
                continue
            try:
                records.append(ActivityRecord(**_normalize_row(row)))
            except PydanticValidationError as e:
                self.logger.warning(f"Skipping activity #{index}: {e.error_count()} invalid fields")

        self.logger.info(f"Loaded {len(records)} of {len(rows)} activities")
        return records

    def load_seed(self, path: Path | None = None) -> LoadSeed | None:
        """
        Load carry-in CTL/ATL from a prior run.

        Accepts either an object with ``ctl`` and ``atl`` or a list of
        snapshots, in which case the last one is used. An optional ``date``
        marks the last day the prior run covered.

        Args:
            path: File to read (defaults to ``settings.prior_snapshot_file``)

        Returns:
            LoadSeed, or None if no seed file is configured

        Raises:
            DataLoadError: If the file cannot be read or has no load values
        """
        seed_file = path or self.settings.prior_snapshot_file
        if seed_file is None:
            return None
        seed_file = Path(seed_file)
        if not seed_file.exists():
            raise DataLoadError(f"Seed file not found: {seed_file}")

        try:
            with open(seed_file, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise DataLoadError(f"Failed to load seed: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get("snapshots", payload)
        if isinstance(payload, list):
            if not payload:
                return LoadSeed()
            payload = payload[-1]

        try:
            seed = LoadSeed(ctl=payload["ctl"], atl=payload["atl"], date=payload.get("date"))
        except (KeyError, TypeError, PydanticValidationError) as e:
            raise DataLoadError(f"Seed file {seed_file} has no valid ctl/atl values") from e

        self.logger.debug(f"Loaded carry-in seed ctl={seed.ctl}, atl={seed.atl}, date={seed.date}")
        return seed

    def load_performance_records(self, path: Path) -> list[PerformanceRecord]:
        """
        Load personal records from CSV or JSON.

        Each row needs ``date`` and ``category``; ``improvement`` (percent
        over the previous best) is optional. JSON may be a list or an object
        with a ``records`` list. Malformed rows are skipped.

        Raises:
            DataLoadError: If the file is missing or cannot be parsed
        """
        records_file = Path(path)
        if not records_file.exists():
            raise DataLoadError(f"Performance records file not found: {records_file}")

        try:
            if records_file.suffix.lower() == ".json":
                with open(records_file, encoding="utf-8") as f:
                    rows = json.load(f)
                if isinstance(rows, dict):
                    rows = rows.get("records", [])
            else:
                df = pd.read_csv(records_file, sep=CSVConstants.DEFAULT_SEPARATOR)
                rows = df.astype(object).where(pd.notna(df), None).to_dict(orient="records")
        except (OSError, ValueError, pd.errors.ParserError) as e:
            raise DataLoadError(f"Failed to load performance records: {e}") from e
        if not isinstance(rows, list):
            raise DataLoadError(f"Expected a list of performance records in {records_file}")

        records = []
        for index, row in enumerate(rows):
            try:
                records.append(PerformanceRecord.model_validate(row))
            except PydanticValidationError as e:
                self.logger.warning(f"Skipping performance record #{index}: {e.error_count()} invalid fields")

        self.logger.info(f"Loaded {len(records)} of {len(rows)} performance records")
        return records
