"""
Daily stress aggregation.

Groups per-activity scores into calendar days and fills the gaps of an
analysis window so the load filter always receives one entry per day.
"""

import logging
from collections.abc import Iterable
from datetime import date

import pandas as pd

from ..exceptions import ValidationError
from ..models import ActivityStress, DailyActivityEntry, DailyStress

logger = logging.getLogger(__name__)


def aggregate_daily(stresses: Iterable[ActivityStress]) -> list[DailyStress]:
    """
    Sum activity TSS per calendar day of the activity start time.

    Args:
        stresses: Scored activities in any order

    Returns:
        One DailyStress per day that has activities, sorted by date
    """
    rows = [
        {
            "date": stress.day,
            "tss": stress.tss,
            "entry": DailyActivityEntry(
                activity_id=stress.activity_id,
                activity_name=stress.activity_name,
                activity_type=stress.activity_type,
                tss=stress.tss,
                confidence=stress.confidence,
            ),
        }
        for stress in stresses
    ]
    if not rows:
        return []

    frame = pd.DataFrame(rows)
    daily = [
        DailyStress(
            date=day,
            total_tss=float(group["tss"].sum()),
            activity_count=len(group),
            activities=list(group["entry"]),
        )
        for day, group in frame.groupby("date", sort=True)
    ]
    logger.debug(f"Aggregated {len(rows)} activities into {len(daily)} days")
    return daily


def fill_missing_dates(daily: Iterable[DailyStress], start: date, end: date) -> list[DailyStress]:
    """
    Produce one entry per calendar day in ``[start, end]``.

    Days without activities become zero-TSS, zero-count entries. Entries
    outside the window are dropped. Applying this to an already gap-free
    series returns the same series.

    Args:
        daily: Daily entries, possibly with gaps
        start: First day of the window (inclusive)
        end: Last day of the window (inclusive)

    Returns:
        Gap-free daily series sorted by date

    Raises:
        ValidationError: If ``start`` is after ``end``
    """
    if start > end:
        raise ValidationError(
            "start_date", f"{start} is after end date {end}", "start_date <= end_date"
        )

    by_date = {entry.date: entry for entry in daily}
    filled = []
    for timestamp in pd.date_range(start, end, freq="D"):
        day = timestamp.date()
        entry = by_date.get(day)
        filled.append(entry if entry is not None else DailyStress(date=day))
    return filled
