"""
Form trend analysis.

Analyzes the TSB signal over trailing 7, 14 and 30 day windows: direction and
speed from an ordinary least-squares slope, volatility, zone transitions and
local reversals. Also summarizes a full snapshot history.
"""

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ..constants import TrendThresholds
from ..models import (
    FormHistorySummary,
    FormSnapshot,
    FormZone,
    MaxFatigue,
    MaxFreshness,
    MultiPeriodTrends,
    PeakFitness,
    Reversal,
    Trend,
    TrendAcceleration,
    TrendDirection,
    TrendPeriod,
    TrendVelocity,
    ZoneChange,
    ZoneDistributionEntry,
)
from ..settings import Settings
from ..utils import round1
from .zones import FormZoneClassifier

logger = logging.getLogger(__name__)


def tsb_slope(values: Sequence[float]) -> tuple[float, float]:
    """
    OLS slope of TSB against day index.

    Args:
        values: TSB values, one per consecutive day

    Returns:
        Tuple of (slope per day, r squared); zeros for fewer than two values
    """
    if len(values) < 2:
        return 0.0, 0.0
    result = stats.linregress(np.arange(len(values)), np.asarray(values, dtype=float))
    r_squared = float(result.rvalue**2) if np.isfinite(result.rvalue) else 0.0
    return float(result.slope), r_squared


class FormTrendAnalyzer:
    """
    Analyzes form (TSB) trends over different time periods.

    Works on FormSnapshots, so zone information comes from whichever
    classifier produced them; the injected classifier is kept for consumers
    that need to reclassify.
    """

    def __init__(self, settings: Settings, classifier: FormZoneClassifier | None = None):
        """
        Initialize the trend analyzer.

        Args:
            settings: Application settings
            classifier: Shared zone classifier
        """
        self.settings = settings
        self.classifier = classifier or FormZoneClassifier(settings)
        self.logger = logging.getLogger(__name__)

    # --- Single-window trends -----------------------------------------------

    def analyze_trend(self, snapshots: Sequence[FormSnapshot], period: TrendPeriod) -> Trend:
        """
        Analyze the trailing window of a snapshot series.

        Args:
            snapshots: Date-ordered snapshots
            period: week (7 days), two_weeks (14) or month (30)

        Returns:
            Trend statistics; an empty trend when the window holds fewer than
            two snapshots
        """
        period = TrendPeriod(period)
        duration_days = TrendThresholds.PERIOD_DAYS[period.value]
        window = list(snapshots[-duration_days:])

        if len(window) < 2:
            return Trend(period=period, duration_days=duration_days)

        tsb_values = np.array([s.tsb for s in window], dtype=float)
        slope, r_squared = tsb_slope(tsb_values)

        return Trend(
            period=period,
            duration_days=duration_days,
            start_date=window[0].date,
            end_date=window[-1].date,
            direction=self.classify_direction(slope),
            slope=round(slope, 2),
            velocity=self.classify_velocity(slope),
            r_squared=round(r_squared, 2),
            average_tsb=round1(tsb_values.mean()),
            min_tsb=round1(tsb_values.min()),
            max_tsb=round1(tsb_values.max()),
            # Population standard deviation
            volatility=round1(np.std(tsb_values, ddof=0)),
            zone_changes=self.detect_zone_changes(window),
            reversals=self.detect_reversals(window),
        )

    def analyze_multiple_trends(self, snapshots: Sequence[FormSnapshot]) -> MultiPeriodTrends:
        """Analyze the week, two-week and month windows."""
        return MultiPeriodTrends(
            week=self.analyze_trend(snapshots, TrendPeriod.WEEK),
            two_weeks=self.analyze_trend(snapshots, TrendPeriod.TWO_WEEKS),
            month=self.analyze_trend(snapshots, TrendPeriod.MONTH),
        )

    @staticmethod
    def classify_direction(slope: float) -> TrendDirection:
        if slope > TrendThresholds.DIRECTION_SLOPE:
            return TrendDirection.IMPROVING
        if slope < -TrendThresholds.DIRECTION_SLOPE:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    @staticmethod
    def classify_velocity(slope: float) -> TrendVelocity:
        magnitude = abs(slope)
        if magnitude >= TrendThresholds.VELOCITY_RAPID:
            return TrendVelocity.RAPID
        if magnitude >= TrendThresholds.VELOCITY_MODERATE:
            return TrendVelocity.MODERATE
        if magnitude >= TrendThresholds.VELOCITY_SLOW:
            return TrendVelocity.SLOW
        return TrendVelocity.STABLE

    @staticmethod
    def detect_zone_changes(window: Sequence[FormSnapshot]) -> list[ZoneChange]:
        """Every adjacent pair of snapshots whose zones differ."""
        return [
            ZoneChange(
                date=current.date,
                from_zone=previous.zone,
                to_zone=current.zone,
                tsb_value=current.tsb,
            )
            for previous, current in zip(window, window[1:])
            if previous.zone != current.zone
        ]

    @staticmethod
    def detect_reversals(window: Sequence[FormSnapshot]) -> list[Reversal]:
        """
        Local extrema of the TSB signal.

        A reversal is a change in the sign of the day-over-day delta where
        at least one of the two adjacent moves exceeds the noise floor. A
        flat delta counts as decreasing.
        """
        reversals = []
        for previous, current, following in zip(window, window[1:], window[2:]):
            before = "increasing" if current.tsb > previous.tsb else "decreasing"
            after = "increasing" if following.tsb > current.tsb else "decreasing"
            if before == after:
                continue
            move_in = abs(current.tsb - previous.tsb)
            move_out = abs(following.tsb - current.tsb)
            if max(move_in, move_out) > TrendThresholds.REVERSAL_NOISE_FLOOR:
                reversals.append(
                    Reversal(
                        date=current.date,
                        tsb_value=current.tsb,
                        previous_direction=before,
                        new_direction=after,
                    )
                )
        return reversals

    # --- Acceleration -------------------------------------------------------

    def detect_trend_acceleration(self, snapshots: Sequence[FormSnapshot]) -> TrendAcceleration:
        """
        Compare the TSB slope of the last week with the week before.

        Args:
            snapshots: Date-ordered snapshots

        Returns:
            TrendAcceleration; accelerating when the slopes differ by more
            than 0.5 TSB/day
        """
        half = TrendThresholds.PERIOD_DAYS[TrendPeriod.WEEK.value]
        recent = snapshots[-half:]
        earlier = snapshots[-2 * half : -half]

        if len(snapshots) < 3 or len(recent) < 2 or len(earlier) < 2:
            return TrendAcceleration(
                is_accelerating=False,
                acceleration_rate=0.0,
                interpretation="Insufficient data for acceleration analysis",
            )

        recent_slope, _ = tsb_slope([s.tsb for s in recent])
        earlier_slope, _ = tsb_slope([s.tsb for s in earlier])
        rate = recent_slope - earlier_slope
        is_accelerating = abs(rate) > TrendThresholds.ACCELERATION_THRESHOLD

        if not is_accelerating:
            interpretation = "Form trend is steady"
        elif rate > 0:
            interpretation = "Form is improving at an accelerating rate (recovery accelerating)"
        else:
            interpretation = (
                "Form is declining at an accelerating rate (fatigue accumulating faster)"
            )

        return TrendAcceleration(
            is_accelerating=is_accelerating,
            acceleration_rate=round(rate, 2),
            interpretation=interpretation,
        )

    # --- Summaries ----------------------------------------------------------

    @staticmethod
    def get_trend_summary(trend: Trend) -> str:
        """Human-readable one-line description of a trend."""
        if trend.direction == TrendDirection.STABLE:
            parts = ["Form is stable"]
        else:
            parts = [f"Form is {trend.velocity.value} {trend.direction.value}"]

        if trend.volatility > TrendThresholds.HIGH_VOLATILITY:
            parts.append("with high volatility")
        elif trend.volatility > TrendThresholds.MODERATE_VOLATILITY:
            parts.append("with moderate volatility")
        else:
            parts.append("with low volatility")

        if trend.zone_changes:
            parts.append(f"({len(trend.zone_changes)} zone changes)")
        if trend.reversals:
            parts.append(f"with {len(trend.reversals)} trend reversals")
        return " ".join(parts)

    def summarize_history(self, snapshots: Sequence[FormSnapshot]) -> FormHistorySummary:
        """
        Summary statistics of a snapshot history.

        Args:
            snapshots: Date-ordered snapshots

        Returns:
            FormHistorySummary with zone distribution, averages and extremes
        """
        if not snapshots:
            return FormHistorySummary(
                total_days=0,
                zone_distribution={zone: ZoneDistributionEntry() for zone in FormZone},
            )

        frame = pd.DataFrame(
            {
                "date": [s.date for s in snapshots],
                "zone": [s.zone for s in snapshots],
                "ctl": [s.ctl for s in snapshots],
                "atl": [s.atl for s in snapshots],
                "tsb": [s.tsb for s in snapshots],
            }
        )
        total_days = len(frame)
        counts = frame["zone"].value_counts()
        distribution = {
            zone: ZoneDistributionEntry(
                days=int(counts.get(zone, 0)),
                percentage=round1(counts.get(zone, 0) / total_days * 100),
            )
            for zone in FormZone
        }

        # idxmax returns the first occurrence of the maximum
        peak = frame.loc[frame["ctl"].idxmax()]
        fatigue = frame.loc[frame["atl"].idxmax()]
        freshness = frame.loc[frame["tsb"].idxmax()]

        return FormHistorySummary(
            total_days=total_days,
            start_date=frame["date"].iloc[0],
            end_date=frame["date"].iloc[-1],
            zone_distribution=distribution,
            average_tsb=round1(frame["tsb"].mean()),
            average_ctl=round1(frame["ctl"].mean()),
            average_atl=round1(frame["atl"].mean()),
            peak_fitness=PeakFitness(date=peak["date"], ctl=float(peak["ctl"])),
            max_fatigue=MaxFatigue(
                date=fatigue["date"], atl=float(fatigue["atl"]), tsb=float(fatigue["tsb"])
            ),
            max_freshness=MaxFreshness(date=freshness["date"], tsb=float(freshness["tsb"])),
        )
