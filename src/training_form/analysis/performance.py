"""
Form/performance correlation.

Relates caller-supplied personal records to the form snapshot of the day
they were set: how records spread over the form zones, which zones produce
them most reliably, and whether bigger improvements come with higher TSB.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from datetime import date

import numpy as np
from scipy import stats

from ..constants import PerformanceConstants
from ..exceptions import ValidationError
from ..models import (
    AnalysisPeriod,
    FormPerformanceCorrelation,
    FormSnapshot,
    FormZone,
    OptimalTSB,
    PerformanceGoal,
    PerformanceRecord,
    TSBCorrelation,
    TSBRange,
    ZonePerformance,
    ZonePerformanceRecord,
    ZoneProbability,
    ZoneScore,
)
from ..settings import Settings
from ..utils import parse_date, round1, round_half_up
from .zones import FormZoneClassifier

logger = logging.getLogger(__name__)

MatchedRecord = tuple[PerformanceRecord, FormSnapshot]

ZONE_RECOMMENDATIONS: dict[FormZone, list[str]] = {
    FormZone.OPTIMAL_RACE: [
        "Target TSB 10-25 for key performances",
        "Plan taper to reach optimal zone on race day",
    ],
    FormZone.FRESH: [
        "Best performance when very fresh (TSB > 25)",
        "Consider longer tapers before important events",
    ],
    FormZone.MAINTENANCE: [
        "Perform well in balanced state (TSB -5 to 10)",
        "May not need extensive taper for good performance",
    ],
    FormZone.PRODUCTIVE_TRAINING: [
        "Achieving results during training load",
        "Can race effectively with moderate fatigue",
    ],
}


def match_records(
    snapshots: Sequence[FormSnapshot], records: Sequence[PerformanceRecord]
) -> list[MatchedRecord]:
    """Pair each record with the snapshot of its day, dropping records without one."""
    by_date = {snapshot.date: snapshot for snapshot in snapshots}
    matched = []
    for record in records:
        snapshot = by_date.get(record.date)
        if snapshot is not None:
            matched.append((record, snapshot))
    return matched


def correlation_significance(coefficient: float) -> str:
    magnitude = abs(coefficient)
    if magnitude >= PerformanceConstants.STRONG_CORRELATION:
        return "strong"
    if magnitude >= PerformanceConstants.MODERATE_CORRELATION:
        return "moderate"
    if magnitude >= PerformanceConstants.WEAK_CORRELATION:
        return "weak"
    return "none"


class FormPerformanceAnalyzer:
    """
    Correlates personal records with form.

    Zones come from the snapshots, so they follow whichever classifier
    built them. The injected classifier supplies the optimal race range
    used as the default target and as the clamp for race goals.
    """

    def __init__(self, settings: Settings, classifier: FormZoneClassifier | None = None):
        """
        Initialize the performance analyzer.

        Args:
            settings: Application settings
            classifier: Shared zone classifier
        """
        self.settings = settings
        self.classifier = classifier or FormZoneClassifier(settings)
        self.logger = logging.getLogger(__name__)

    @property
    def default_optimal_range(self) -> TSBRange:
        low, high = self.classifier.base_ranges[FormZone.OPTIMAL_RACE]
        return TSBRange(min=low, max=high)

    # --- Correlation --------------------------------------------------------

    def analyze_correlation(
        self,
        snapshots: Sequence[FormSnapshot],
        records: Sequence[PerformanceRecord],
        start_date: date | str,
        end_date: date | str,
    ) -> FormPerformanceCorrelation:
        """
        Analyze how personal records relate to form over a period.

        Args:
            snapshots: Form snapshots (any range)
            records: Personal records (any range)
            start_date: First day of the period
            end_date: Last day of the period

        Returns:
            FormPerformanceCorrelation; an empty result with an
            "insufficient data" insight when the period holds no snapshots
            or no records

        Raises:
            ValidationError: If a date is malformed or the period is inverted
        """
        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date")
        if start > end:
            raise ValidationError("start_date", f"{start} is after {end}", "a date not after end_date")

        period = AnalysisPeriod(start_date=start, end_date=end, days=(end - start).days)
        in_range = [s for s in snapshots if start <= s.date <= end]
        period_records = [r for r in records if start <= r.date <= end]

        if not in_range or not period_records:
            self.logger.info(f"No records or snapshots between {start} and {end} to correlate")
            return FormPerformanceCorrelation(
                period=period,
                performance_by_zone={zone: ZonePerformance() for zone in FormZone},
                tsb_correlation=TSBCorrelation(optimal_tsb_range=self.default_optimal_range),
                insights=["Insufficient data for correlation analysis"],
                recommendations=["Collect more performance data to analyze patterns"],
            )

        by_zone = self.performance_by_zone(in_range, period_records)
        optimal_zones = self.identify_optimal_zones(by_zone)
        correlation = self.tsb_correlation(in_range, period_records)

        self.logger.debug(
            f"Correlated {len(period_records)} records with {len(in_range)} snapshots: "
            f"r={correlation.coefficient} ({correlation.significance})"
        )
        return FormPerformanceCorrelation(
            period=period,
            performance_by_zone=by_zone,
            optimal_zones=optimal_zones,
            tsb_correlation=correlation,
            insights=self._insights(by_zone, optimal_zones, correlation),
            recommendations=self._recommendations(optimal_zones, correlation),
        )

    def performance_by_zone(
        self, snapshots: Sequence[FormSnapshot], records: Sequence[PerformanceRecord]
    ) -> dict[FormZone, ZonePerformance]:
        """Days spent in and records set in each zone."""
        days = Counter(snapshot.zone for snapshot in snapshots)
        matched = match_records(snapshots, records)

        result = {}
        for zone in FormZone:
            prs = [
                ZonePerformanceRecord(
                    category=record.category,
                    date=record.date,
                    tsb=snapshot.tsb,
                    improvement=record.improvement or 0.0,
                )
                for record, snapshot in matched
                if snapshot.zone == zone
            ]
            in_zone = days[zone]
            result[zone] = ZonePerformance(
                total_prs=len(prs),
                pr_density=round(len(prs) / in_zone, 3) if in_zone else 0.0,
                average_tsb=round1(float(np.mean([p.tsb for p in prs]))) if prs else 0.0,
                days_in_zone=in_zone,
                prs=prs,
            )
        return result

    @staticmethod
    def zone_score(performance: ZonePerformance) -> int:
        """
        Score of a zone for performance, 0-100.

        Up to 50 points for record density, 30 for the record count and 20
        for time spent in the zone.
        """
        if performance.days_in_zone == 0:
            return 0
        density = min(
            performance.pr_density * PerformanceConstants.DENSITY_WEIGHT,
            PerformanceConstants.DENSITY_CAP,
        )
        count = min(
            performance.total_prs / PerformanceConstants.TOTAL_PRS_FULL * PerformanceConstants.TOTAL_PRS_CAP,
            PerformanceConstants.TOTAL_PRS_CAP,
        )
        days = min(
            performance.days_in_zone / PerformanceConstants.DAYS_FULL * PerformanceConstants.DAYS_CAP,
            PerformanceConstants.DAYS_CAP,
        )
        return round_half_up(density + count + days)

    def identify_optimal_zones(self, by_zone: dict[FormZone, ZonePerformance]) -> list[ZoneScore]:
        """Zones ordered by score, best first."""
        scores = []
        for zone, perf in by_zone.items():
            score = self.zone_score(perf)
            scores.append(ZoneScore(zone=zone, score=score, reasoning=self._reasoning(zone, perf, score)))
        return sorted(scores, key=lambda entry: entry.score, reverse=True)

    @staticmethod
    def _reasoning(zone: FormZone, performance: ZonePerformance, score: int) -> str:
        if performance.total_prs == 0:
            return f"No PRs achieved in {zone.value} zone"
        if score >= PerformanceConstants.EXCELLENT_SCORE:
            label = "excellent"
        elif score >= PerformanceConstants.GOOD_SCORE:
            label = "good"
        elif score >= PerformanceConstants.MODERATE_SCORE:
            label = "moderate"
        else:
            label = "low"
        return (
            f"{performance.total_prs} PRs in {performance.days_in_zone} days, "
            f"density {performance.pr_density * 100:.1f}% per day ({label} performance zone)"
        )

    def tsb_correlation(
        self, snapshots: Sequence[FormSnapshot], records: Sequence[PerformanceRecord]
    ) -> TSBCorrelation:
        """
        Pearson correlation between TSB and the size of the improvement.

        The optimal range is the mean TSB of record days plus or minus one
        (population) standard deviation. The coefficient is 0 when fewer
        than two records match or either side is constant.
        """
        matched = match_records(snapshots, records)
        if not matched:
            return TSBCorrelation(optimal_tsb_range=self.default_optimal_range)

        tsb = np.array([snapshot.tsb for _, snapshot in matched], dtype=float)
        improvement = np.abs([record.improvement or 0.0 for record, _ in matched])

        coefficient, p_value = 0.0, None
        if len(matched) >= 2 and np.ptp(tsb) > 0 and np.ptp(improvement) > 0:
            result = stats.pearsonr(tsb, improvement)
            coefficient = round(float(result.statistic), 3)
            p_value = float(result.pvalue)

        mean, spread = float(tsb.mean()), float(tsb.std())
        return TSBCorrelation(
            coefficient=coefficient,
            significance=correlation_significance(coefficient),
            p_value=p_value,
            optimal_tsb_range=TSBRange(min=round1(mean - spread), max=round1(mean + spread)),
        )

    @staticmethod
    def _insights(
        by_zone: dict[FormZone, ZonePerformance],
        optimal_zones: list[ZoneScore],
        correlation: TSBCorrelation,
    ) -> list[str]:
        insights = []
        if optimal_zones and optimal_zones[0].score > 0:
            top = optimal_zones[0].zone
            insights.append(
                f"Best performance in {top.value} zone with {by_zone[top].total_prs} PRs"
            )
        if correlation.significance != "none":
            insights.append(
                f"{correlation.significance.capitalize()} correlation ({correlation.coefficient}) "
                "between TSB and performance"
            )
        insights.append(
            f"Optimal TSB range: {correlation.optimal_tsb_range.min} to {correlation.optimal_tsb_range.max}"
        )

        fresh = by_zone[FormZone.FRESH].total_prs
        optimal = by_zone[FormZone.OPTIMAL_RACE].total_prs
        fatigued = by_zone[FormZone.FATIGUED].total_prs
        if optimal > fresh * 2:
            insights.append("Peak performance occurs with optimal race freshness, not excessive rest")
        elif fresh > optimal:
            insights.append("Best results achieved when very fresh, consider a longer taper")
        if fatigued > optimal:
            insights.append("Achieving PRs while fatigued indicates strong base fitness")
        return insights

    @staticmethod
    def _recommendations(optimal_zones: list[ZoneScore], correlation: TSBCorrelation) -> list[str]:
        if not optimal_zones or optimal_zones[0].score == 0:
            return ["Insufficient performance data for specific recommendations"]
        recommendations = list(ZONE_RECOMMENDATIONS.get(optimal_zones[0].zone, []))
        tsb_range = correlation.optimal_tsb_range
        recommendations.append(
            f"Plan important workouts/races when TSB is {tsb_range.min} to {tsb_range.max}"
        )
        return recommendations

    # --- Goal targets and probabilities ---------------------------------------

    def find_optimal_tsb_for_goal(
        self,
        snapshots: Sequence[FormSnapshot],
        records: Sequence[PerformanceRecord],
        goal: PerformanceGoal = PerformanceGoal.RACE,
    ) -> OptimalTSB:
        """
        TSB range in which records for a goal were set.

        The range is the mean TSB of record days widened by the goal's
        number of standard deviations and clamped to the goal's bounds.
        Confidence grows by 10 per matched record up to 100.

        Args:
            snapshots: Form snapshots
            records: Personal records
            goal: race, training_breakthrough or consistent_performance

        Returns:
            OptimalTSB; the optimal race range with zero confidence when no
            record matches a snapshot
        """
        goal = PerformanceGoal(goal)
        matched = match_records(snapshots, records)
        if not matched:
            return OptimalTSB(
                goal=goal,
                optimal_tsb_range=self.default_optimal_range,
                optimal_zone=FormZone.OPTIMAL_RACE,
                confidence=0,
            )

        tsb = np.array([snapshot.tsb for _, snapshot in matched], dtype=float)
        mean, spread = float(tsb.mean()), float(tsb.std())
        if goal == PerformanceGoal.RACE:
            low, high = self.classifier.base_ranges[FormZone.OPTIMAL_RACE]
            widths, zone = 1.0, FormZone.OPTIMAL_RACE
        else:
            low, high, widths = PerformanceConstants.GOAL_BOUNDS[goal.value]
            zone = FormZone.MAINTENANCE
        lower = max(mean - spread * widths, low)
        upper = min(mean + spread * widths, high)
        if lower > upper:
            # Records fall entirely outside the goal bounds
            lower, upper = low, high
        tsb_range = TSBRange(min=round1(lower), max=round1(upper))

        inside = int(np.count_nonzero((tsb >= lower) & (tsb <= upper)))
        improvements = [abs(r.improvement) for r, _ in matched if r.improvement is not None]
        return OptimalTSB(
            goal=goal,
            optimal_tsb_range=tsb_range,
            optimal_zone=zone,
            confidence=min(100, len(matched) * PerformanceConstants.CONFIDENCE_PER_PR),
            pr_count=len(matched),
            average_improvement=round1(float(np.mean(improvements))) if improvements else 0.0,
            success_rate=round1(inside / len(matched) * 100),
        )

    def calculate_performance_probability(
        self, snapshots: Sequence[FormSnapshot], records: Sequence[PerformanceRecord]
    ) -> dict[FormZone, ZoneProbability]:
        """Chance of a record per day, records per week and a quality score for every zone."""
        result = {}
        for zone, perf in self.performance_by_zone(snapshots, records).items():
            if perf.days_in_zone == 0:
                result[zone] = ZoneProbability()
                continue
            rate = perf.total_prs / perf.days_in_zone
            result[zone] = ZoneProbability(
                pr_probability=round1(rate * 100),
                prs_per_week=round1(rate * 7),
                quality_score=self._quality_score(perf),
            )
        return result

    @staticmethod
    def _quality_score(performance: ZonePerformance) -> int:
        """Record density scaled up by the average improvement, at most threefold."""
        if performance.total_prs == 0:
            return 0
        average = float(np.mean([abs(p.improvement) for p in performance.prs]))
        factor = min(
            average / PerformanceConstants.IMPROVEMENT_SCALE,
            PerformanceConstants.MAX_IMPROVEMENT_FACTOR,
        )
        return round_half_up(performance.pr_density * 100 * (1 + factor))
