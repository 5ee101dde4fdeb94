"""
Recursive training load filter.

CTL (fitness) and ATL (fatigue) are exponentially weighted moving averages
of daily TSS:

    ctl[i] = ctl[i-1] + (tss[i] - ctl[i-1]) / ctl_days
    atl[i] = atl[i-1] + (tss[i] - atl[i-1]) / atl_days

which is ``ewm(alpha=1/days, adjust=False)`` over the series with the seed
prepended. The recursion runs on unrounded values; only the surfaced
LoadPoints are rounded, and TSB is taken from the rounded CTL and ATL.
"""

import logging
from collections.abc import Sequence
from datetime import date
from typing import Protocol

import numpy as np
import pandas as pd

from ..constants import TrainingLoadWindows
from ..exceptions import InvalidDataError, ValidationError
from ..models import DailyStress, LoadPoint, LoadSeed
from ..utils import add_days, round1

logger = logging.getLogger(__name__)


class HasLoad(Protocol):
    """Anything carrying a date with CTL and ATL values."""

    date: date
    ctl: float
    atl: float


def validate_time_constant(days: float, parameter: str) -> float:
    """
    Check a filter time constant.

    Raises:
        ValidationError: If ``days`` is below one day
    """
    if days is None or days < 1:
        raise ValidationError(parameter, f"time constant {days} is not positive", "number of days >= 1")
    return days


def tsb_from(ctl: float, atl: float) -> float:
    """Training Stress Balance computed on the surfaced (rounded) values."""
    return round1(round1(ctl) - round1(atl))


def _ewma(values: Sequence[float], seed: float, days: float) -> np.ndarray:
    """Run the load recursion from ``seed`` over ``values``."""
    series = pd.Series([seed, *values], dtype=float)
    return series.ewm(alpha=1.0 / days, adjust=False).mean().to_numpy()[1:]


def simulate(
    ctl: float,
    atl: float,
    tss_plan: Sequence[float],
    ctl_days: float = TrainingLoadWindows.CTL_DAYS,
    atl_days: float = TrainingLoadWindows.ATL_DAYS,
) -> list[tuple[float, float]]:
    """
    Project CTL and ATL day by day under a planned load.

    Args:
        ctl: Starting CTL
        atl: Starting ATL
        tss_plan: Planned TSS for each future day
        ctl_days: CTL time constant
        atl_days: ATL time constant

    Returns:
        Unrounded ``(ctl, atl)`` for each planned day
    """
    validate_time_constant(ctl_days, "ctl_days")
    validate_time_constant(atl_days, "atl_days")
    if len(tss_plan) == 0:
        return []
    ctl_values = _ewma(tss_plan, ctl, ctl_days)
    atl_values = _ewma(tss_plan, atl, atl_days)
    return [(float(c), float(a)) for c, a in zip(ctl_values, atl_values)]


def _check_gap_free(daily: Sequence[DailyStress]) -> None:
    """Raise if the daily series is out of order or has missing days."""
    for previous, current in zip(daily, daily[1:]):
        step = (current.date - previous.date).days
        if step != 1:
            raise InvalidDataError(
                f"Daily series must be gap-free and ordered: "
                f"{previous.date} is followed by {current.date}"
            )


def compute_load_series(
    daily: Sequence[DailyStress],
    seed: LoadSeed | None = None,
    ctl_days: float = TrainingLoadWindows.CTL_DAYS,
    atl_days: float = TrainingLoadWindows.ATL_DAYS,
) -> list[LoadPoint]:
    """
    Compute CTL/ATL/TSB for every day of a gap-free daily series.

    Args:
        daily: Date-ordered daily stress with exactly one entry per day
        seed: Carry-in CTL/ATL; both default to 0. A dated seed must fall on
            the day before the first entry.
        ctl_days: CTL time constant
        atl_days: ATL time constant

    Returns:
        One LoadPoint per input day

    Raises:
        InvalidDataError: If the series has gaps, is out of order or does not
            follow the seed date
        ValidationError: If a time constant is not positive
    """
    validate_time_constant(ctl_days, "ctl_days")
    validate_time_constant(atl_days, "atl_days")
    _check_gap_free(daily)
    if not daily:
        return []

    seed = seed or LoadSeed()
    if seed.date is not None and add_days(seed.date, 1) != daily[0].date:
        raise InvalidDataError(
            f"Seed dated {seed.date} does not end the day before the series starts ({daily[0].date})"
        )
    tss = [entry.total_tss for entry in daily]
    loads = simulate(seed.ctl, seed.atl, tss, ctl_days, atl_days)

    points = [
        LoadPoint(
            date=entry.date,
            tss=entry.total_tss,
            ctl=round1(ctl),
            atl=round1(atl),
            tsb=tsb_from(ctl, atl),
        )
        for entry, (ctl, atl) in zip(daily, loads)
    ]
    logger.debug(
        f"Computed load series for {len(points)} days "
        f"({points[0].date} to {points[-1].date})"
    )
    return points


def seed_from_snapshots(snapshots: Sequence[HasLoad]) -> LoadSeed:
    """
    Build a carry-in seed from the last point of a prior series.

    Args:
        snapshots: Prior LoadPoints or FormSnapshots in date order

    Returns:
        LoadSeed with the last date and CTL/ATL, or an undated zero seed if
        there is no history
    """
    if not snapshots:
        return LoadSeed()
    last = snapshots[-1]
    return LoadSeed(ctl=last.ctl, atl=last.atl, date=last.date)
