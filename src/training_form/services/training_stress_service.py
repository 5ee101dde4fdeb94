"""
Training stress balance service.

Coordinates the path from raw activity records to a CTL/ATL/TSB result for
a target date: scoring, daily aggregation, gap filling over the analysis
window and the recursive load filter.
"""

import logging
from collections.abc import Sequence
from datetime import date
from typing import NamedTuple, Protocol

from ..analysis import aggregate_daily, compute_load_series, fill_missing_dates
from ..constants import FormStatusThresholds, TrainingLoadWindows
from ..exceptions import ValidationError
from ..metrics import StressScorer
from ..models import (
    ActivityRecord,
    ActivityStress,
    AnalysisPeriod,
    DailyStress,
    FormStatus,
    LoadPoint,
    LoadSeed,
    StressSummary,
    TrainingStressBalance,
    TrainingStressBalanceResult,
    TrainingStressTrends,
    TrendDirection,
)
from ..settings import Settings
from ..utils import add_days, parse_date, round1

logger = logging.getLogger(__name__)

NO_DATA_RECOMMENDATION = "No training data available for analysis."

FORM_STATUS_DESCRIPTIONS: dict[FormStatus, str] = {
    FormStatus.FRESH: "Very high form, possible detraining",
    FormStatus.OPTIMAL: "Peak readiness for performance",
    FormStatus.NEUTRAL: "Maintenance phase",
    FormStatus.FATIGUED: "Productive training stress",
    FormStatus.OVERREACHED: "High injury/illness risk",
}


class LoadWindow(NamedTuple):
    """Intermediate products of one load computation."""

    stresses: list[ActivityStress]
    daily: list[DailyStress]
    points: list[LoadPoint]
    start: date
    end: date


class TrainingStressServiceProtocol(Protocol):
    """Protocol for training stress services."""

    def calculate(
        self, records: Sequence[ActivityRecord], target_date: date | str | None = None
    ) -> TrainingStressBalanceResult:
        """Compute the training stress balance for a date."""
        ...


def determine_form_status(tsb: float) -> FormStatus:
    """Coarse form status of a TSB value."""
    if tsb > FormStatusThresholds.FRESH_ABOVE:
        return FormStatus.FRESH
    if tsb >= FormStatusThresholds.OPTIMAL_MIN:
        return FormStatus.OPTIMAL
    if tsb >= FormStatusThresholds.NEUTRAL_MIN:
        return FormStatus.NEUTRAL
    if tsb >= FormStatusThresholds.FATIGUED_MIN:
        return FormStatus.FATIGUED
    return FormStatus.OVERREACHED


def form_recommendation(tsb: float, ctl: float, atl: float) -> str:
    """Training recommendation text for a load point."""
    status = determine_form_status(tsb)
    if status == FormStatus.FRESH:
        return (
            "Consider a hard training session or race. "
            "You are well-rested but risk detraining if this continues."
        )
    if status == FormStatus.OPTIMAL:
        return (
            "Great time for a race or high-intensity workout. "
            "You have good fitness with manageable fatigue."
        )
    if status == FormStatus.NEUTRAL:
        return (
            "Maintain current training load. "
            "Continue balanced training without major increases."
        )
    if status == FormStatus.FATIGUED:
        if atl > ctl * FormStatusThresholds.HIGH_FATIGUE_RATIO:
            return (
                "High fatigue detected. "
                "Consider a recovery day or reducing training intensity."
            )
        return (
            "Normal training fatigue. You are building fitness. "
            "Ensure adequate recovery between hard sessions."
        )
    return (
        "WARNING: High risk of overtraining. "
        "Take immediate rest days and reduce training load significantly."
    )


class TrainingStressService:
    """
    Service computing training stress balance from activity records.

    Records outside the analysis window are ignored. The window covers
    ``days`` days before the target date plus the target date itself.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the training stress service.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)
        self.scorer = StressScorer(settings)

    def validate_days(self, days: int | None) -> int:
        """
        Resolve and check the analysis window length.

        Raises:
            ValidationError: If ``days`` is outside 7-365
        """
        if days is None:
            return self.settings.history_days
        lower = TrainingLoadWindows.MIN_HISTORY_DAYS
        upper = TrainingLoadWindows.MAX_HISTORY_DAYS
        if not lower <= days <= upper:
            raise ValidationError("days", f"{days} is out of range", f"integer {lower}-{upper}")
        return days

    def build_load_window(
        self,
        records: Sequence[ActivityRecord],
        end_date: date,
        days: int,
        seed: LoadSeed | None = None,
    ) -> LoadWindow:
        """
        Score, aggregate, fill and filter the records of one window.

        A dated seed moves the start of the recursion to the day after the
        seed. If that is earlier than the window, the days in between are
        still filtered (activities included, gaps at zero TSS) but only the
        window itself is reported.

        Args:
            records: Activity records (any range, any order)
            end_date: Last day of the window
            days: Days of history before ``end_date``
            seed: Carry-in CTL/ATL, optionally dated

        Returns:
            LoadWindow with the intermediate series

        Raises:
            ValidationError: If the seed is dated on or after ``end_date``
        """
        start = add_days(end_date, -days)
        compute_start = start
        if seed is not None and seed.date is not None:
            if seed.date >= end_date:
                raise ValidationError(
                    "seed",
                    f"dated {seed.date}, not before {end_date}",
                    "a prior series ending before the target date",
                )
            compute_start = add_days(seed.date, 1)
            start = max(start, compute_start)

        in_window = [r for r in records if compute_start <= r.start_time.date() <= end_date]
        if len(in_window) < len(records):
            self.logger.debug(
                f"Ignoring {len(records) - len(in_window)} activities outside {compute_start}..{end_date}"
            )

        stresses = self.scorer.score_many(in_window)
        daily = fill_missing_dates(aggregate_daily(stresses), compute_start, end_date)
        points = compute_load_series(
            daily,
            seed=seed,
            ctl_days=self.settings.ctl_days,
            atl_days=self.settings.atl_days,
        )

        skip = (start - compute_start).days
        if skip:
            self.logger.debug(f"Decayed carry-in seed across {skip} days before {start}")
        return LoadWindow(
            stresses=[s for s in stresses if s.start_time.date() >= start],
            daily=daily[skip:],
            points=points[skip:],
            start=start,
            end=end_date,
        )

    def calculate(
        self,
        records: Sequence[ActivityRecord],
        target_date: date | str | None = None,
        days: int | None = None,
        include_time_series: bool = True,
        seed: LoadSeed | None = None,
    ) -> TrainingStressBalanceResult:
        """
        Compute CTL/ATL/TSB for a target date.

        Args:
            records: Activity records
            target_date: Date to report (YYYY-MM-DD or date; defaults to today)
            days: History window in days (7-365)
            include_time_series: Include the daily load series in the result
            seed: Carry-in CTL/ATL at the start of the window

        Returns:
            TrainingStressBalanceResult; a zeroed result with a "no training
            data" recommendation when the window holds no activities

        Raises:
            ValidationError: If the date or window length is invalid
        """
        target = parse_date(target_date, "target_date") or date.today()
        days = self.validate_days(days)
        window = self.build_load_window(records, target, days, seed)
        period = AnalysisPeriod(
            start_date=window.start, end_date=window.end, days=(window.end - window.start).days
        )

        if not window.stresses and seed is None:
            self.logger.info(f"No activities between {window.start} and {window.end}")
            status = determine_form_status(0)
            return TrainingStressBalanceResult(
                current_date=target,
                period=period,
                current=TrainingStressBalance(
                    date=target,
                    ctl=0,
                    atl=0,
                    tsb=0,
                    form_status=status,
                    form_description=FORM_STATUS_DESCRIPTIONS[status],
                    recommendation=NO_DATA_RECOMMENDATION,
                ),
                time_series=[] if include_time_series else None,
                summary=StressSummary(),
            )

        current = window.points[-1]
        status = determine_form_status(current.tsb)
        with_hr, estimated = self.scorer.count_by_method(window.stresses)
        total_tss = sum(day.total_tss for day in window.daily)

        self.logger.info(
            f"Training stress on {target}: CTL={current.ctl} ATL={current.atl} TSB={current.tsb}"
        )
        return TrainingStressBalanceResult(
            current_date=target,
            period=period,
            current=TrainingStressBalance(
                date=current.date,
                ctl=current.ctl,
                atl=current.atl,
                tsb=current.tsb,
                form_status=status,
                form_description=FORM_STATUS_DESCRIPTIONS[status],
                recommendation=form_recommendation(current.tsb, current.ctl, current.atl),
                trends=self._trends(window.points),
            ),
            time_series=window.points if include_time_series else None,
            summary=StressSummary(
                total_activities=len(window.stresses),
                total_tss=round1(total_tss),
                average_daily_tss=round1(total_tss / len(window.daily)),
                activities_with_hr=with_hr,
                activities_estimated=estimated,
            ),
        )

    @staticmethod
    def _trends(points: Sequence[LoadPoint]) -> TrainingStressTrends | None:
        """Change of CTL/ATL/TSB over the trend lookback, if history reaches back that far."""
        lookback = TrainingLoadWindows.TREND_LOOKBACK_DAYS
        if len(points) <= lookback:
            return None
        current, previous = points[-1], points[-1 - lookback]
        tsb_change = current.tsb - previous.tsb
        threshold = TrainingLoadWindows.TREND_CHANGE_THRESHOLD
        if tsb_change > threshold:
            trend = TrendDirection.IMPROVING
        elif tsb_change < -threshold:
            trend = TrendDirection.DECLINING
        else:
            trend = TrendDirection.STABLE
        return TrainingStressTrends(
            ctl_change=round1(current.ctl - previous.ctl),
            atl_change=round1(current.atl - previous.atl),
            tsb_change=round1(tsb_change),
            tsb_trend=trend,
        )
