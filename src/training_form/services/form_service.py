"""
High-level service for form analysis workflows.

This service builds form snapshots from activity records and coordinates the
zone classifier, trend analyzer, predictor and recommendation engine. A
single classifier instance is injected into every consumer so that custom
zone thresholds apply consistently.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from ..analysis import (
    FormPerformanceAnalyzer,
    FormPredictor,
    FormRecommendationEngine,
    FormTrendAnalyzer,
    FormZoneClassifier,
)
from ..analysis.predictor import PlannedTSS
from ..constants import PredictionConstants
from ..models import (
    ActivityRecord,
    DailyStress,
    FormAnalysis,
    FormHistory,
    FormPredictions,
    FormRecommendations,
    FormSnapshot,
    FormWarning,
    FormZone,
    LoadPoint,
    LoadSeed,
    LoadState,
    PerformanceRecord,
    Prediction,
    RecommendationContext,
    RecoveryEstimate,
    ScenarioDay,
    SnapshotChanges,
    TaperPlan,
    TaperStrategy,
    UpcomingRace,
)
from ..settings import Settings
from ..utils import add_days, parse_date, round1
from .training_stress_service import NO_DATA_RECOMMENDATION, TrainingStressService

logger = logging.getLogger(__name__)

WARNING_SEVERITY: dict[FormZone, str] = {
    FormZone.OVERREACHED: "critical",
    FormZone.FATIGUED: "warning",
}


class FormAnalysisService:
    """
    Service coordinating current-form analysis, history and projections.

    All methods accept activity records and recompute the load series per
    call; nothing is cached between requests.
    """

    def __init__(self, settings: Settings, classifier: FormZoneClassifier | None = None):
        """
        Initialize the form analysis service.

        Args:
            settings: Application settings
            classifier: Zone classifier shared by all consumers
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

        self.classifier = classifier or FormZoneClassifier(settings)
        self.stress_service = TrainingStressService(settings)
        self.trend_analyzer = FormTrendAnalyzer(settings, self.classifier)
        self.predictor = FormPredictor(settings, self.classifier)
        self.recommendation_engine = FormRecommendationEngine(settings, self.classifier)
        self.performance_analyzer = FormPerformanceAnalyzer(settings, self.classifier)

    # --- Snapshots ----------------------------------------------------------

    def build_snapshots(
        self, points: Sequence[LoadPoint], daily: Iterable[DailyStress] = ()
    ) -> list[FormSnapshot]:
        """
        Classify load points and attach day-over-day changes.

        Args:
            points: Date-ordered load points
            daily: Daily stress used for activity counts

        Returns:
            One FormSnapshot per load point
        """
        counts = {entry.date: entry.activity_count for entry in daily}
        snapshots: list[FormSnapshot] = []
        for point in points:
            info = self.classifier.classify(point.tsb, point.ctl)
            changes = SnapshotChanges()
            if snapshots:
                previous = snapshots[-1]
                changes = SnapshotChanges(
                    tss_change=round1(point.tss - previous.tss),
                    ctl_change=round1(point.ctl - previous.ctl),
                    atl_change=round1(point.atl - previous.atl),
                    tsb_change=round1(point.tsb - previous.tsb),
                    zone_changed=info.zone != previous.zone,
                    previous_zone=previous.zone,
                )
            snapshots.append(
                FormSnapshot(
                    date=point.date,
                    tss=point.tss,
                    ctl=point.ctl,
                    atl=point.atl,
                    tsb=point.tsb,
                    zone=info.zone,
                    zone_info=info,
                    activity_count=counts.get(point.date, 0),
                    changes=changes,
                )
            )
        return snapshots

    def load_snapshots(
        self,
        records: Sequence[ActivityRecord],
        end_date: date,
        days: int | None = None,
        seed: LoadSeed | None = None,
    ) -> list[FormSnapshot]:
        """
        Snapshot series for the window ending on ``end_date``.

        Returns:
            Snapshots, or an empty list when the window has no activities and
            no seed
        """
        days = self.stress_service.validate_days(days)
        window = self.stress_service.build_load_window(records, end_date, days, seed)
        if not window.stresses and seed is None:
            return []
        return self.build_snapshots(window.points, window.daily)

    def current_state(
        self,
        records: Sequence[ActivityRecord],
        as_of: date,
        days: int | None = None,
        seed: LoadSeed | None = None,
    ) -> LoadState:
        """Load state on ``as_of``; zero when there is no history."""
        snapshots = self.load_snapshots(records, as_of, days, seed)
        if not snapshots:
            return LoadState()
        last = snapshots[-1]
        return LoadState(ctl=last.ctl, atl=last.atl, tsb=last.tsb)

    def _empty_snapshot(self, day: date) -> FormSnapshot:
        info = self.classifier.classify(0.0, 0.0)
        return FormSnapshot(
            date=day, tss=0, ctl=0, atl=0, tsb=0, zone=info.zone, zone_info=info
        )

    # --- Current form -------------------------------------------------------

    def analyze_current_form(
        self,
        records: Sequence[ActivityRecord],
        analysis_date: date | str | None = None,
        days: int | None = None,
        include_predictions: bool = True,
        include_time_series: bool = False,
        upcoming_race: UpcomingRace | None = None,
        seed: LoadSeed | None = None,
        include_performance_correlation: bool = False,
        performance_records: Sequence[PerformanceRecord] = (),
    ) -> FormAnalysis:
        """
        Analyze current form with trends, predictions and recommendations.

        Args:
            records: Activity records
            analysis_date: Date to analyze (defaults to today)
            days: History window in days (7-365)
            include_predictions: Project form one and two weeks ahead at a
                maintenance load of 90% of CTL
            include_time_series: Attach the snapshot series
            upcoming_race: Optional race context for recommendations
            seed: Carry-in CTL/ATL at the start of the window
            include_performance_correlation: Correlate ``performance_records``
                with the snapshots of the window
            performance_records: Personal records set by the athlete

        Returns:
            FormAnalysis; with no activities in the window, a zeroed snapshot
            and a "no training data" recommendation

        Raises:
            ValidationError: If the date or window length is invalid
        """
        analysis_day = parse_date(analysis_date, "analysis_date") or date.today()
        snapshots = self.load_snapshots(records, analysis_day, days, seed)
        trends = self.trend_analyzer.analyze_multiple_trends(snapshots)
        acceleration = self.trend_analyzer.detect_trend_acceleration(snapshots)
        correlation = None
        if include_performance_correlation:
            correlation = self.performance_analyzer.analyze_correlation(
                snapshots,
                performance_records,
                start_date=snapshots[0].date if snapshots else analysis_day,
                end_date=analysis_day,
            )

        if not snapshots:
            self.logger.info(f"No training data for form analysis on {analysis_day}")
            return FormAnalysis(
                analysis_date=analysis_day,
                current=self._empty_snapshot(analysis_day),
                trends=trends,
                acceleration=acceleration,
                recommendations=FormRecommendations(immediate=[NO_DATA_RECOMMENDATION]),
                time_series=[] if include_time_series else None,
                performance_correlation=correlation,
            )

        current = snapshots[-1]
        state = LoadState(ctl=current.ctl, atl=current.atl, tsb=current.tsb)

        predictions = None
        if include_predictions:
            maintenance_tss = current.ctl * PredictionConstants.MAINTENANCE_LOAD_FACTOR
            predictions = FormPredictions(
                next_week=self.predictor.predict_future_form(
                    add_days(analysis_day, 7), maintenance_tss, state, as_of=analysis_day
                ),
                two_weeks=self.predictor.predict_future_form(
                    add_days(analysis_day, 14), maintenance_tss, state, as_of=analysis_day
                ),
            )

        recommendation = self.recommendation_engine.generate_recommendation(
            RecommendationContext(
                current_zone=current.zone,
                current_tsb=current.tsb,
                current_ctl=current.ctl,
                current_atl=current.atl,
                tsb_trend=trends.week.direction,
                recent_zone_changes=len(trends.week.zone_changes),
                upcoming_race=upcoming_race,
            ),
            on_date=analysis_day,
        )

        severity = WARNING_SEVERITY.get(current.zone, "info")
        warnings = [
            FormWarning(severity=severity, type="form_status", message=message)
            for message in recommendation.guidance.cautions
        ]
        if self.classifier.is_excessively_fresh(current.tsb, current.ctl):
            warnings.append(
                FormWarning(
                    severity="info",
                    type="detraining_risk",
                    message="Extended freshness may lead to detraining",
                )
            )

        self.logger.info(
            f"Form on {analysis_day}: {current.zone.value} (TSB {current.tsb}, CTL {current.ctl})"
        )
        return FormAnalysis(
            analysis_date=analysis_day,
            current=current,
            trends=trends,
            acceleration=acceleration,
            predictions=predictions,
            recommendations=FormRecommendations(
                immediate=[recommendation.guidance.primary],
                short_term=recommendation.guidance.secondary,
                long_term=[current.zone_info.recommendations.volume_guidance],
            ),
            warnings=warnings,
            time_series=snapshots if include_time_series else None,
            performance_correlation=correlation,
        )

    def get_form_history(
        self,
        records: Sequence[ActivityRecord],
        end_date: date | str | None = None,
        days: int | None = None,
        seed: LoadSeed | None = None,
    ) -> FormHistory:
        """
        Snapshot history and its summary statistics.

        Args:
            records: Activity records
            end_date: Last day of the history (defaults to today)
            days: History window in days (7-365)
            seed: Carry-in CTL/ATL at the start of the window

        Returns:
            FormHistory
        """
        end = parse_date(end_date, "end_date") or date.today()
        snapshots = self.load_snapshots(records, end, days, seed)
        return FormHistory(
            snapshots=snapshots, summary=self.trend_analyzer.summarize_history(snapshots)
        )

    # --- Projections --------------------------------------------------------

    def predict_future_form(
        self,
        records: Sequence[ActivityRecord],
        target_date: date | str,
        planned_tss: PlannedTSS,
        recovery_days: Iterable[int] = (),
        as_of: date | str | None = None,
        seed: LoadSeed | None = None,
    ) -> Prediction:
        """
        Predict form on a future date from the current state of ``records``.

        Raises:
            ValidationError: If a date is malformed or the target is not in the future
        """
        as_of_day = parse_date(as_of, "as_of") or date.today()
        target = parse_date(target_date, "target_date")
        state = self.current_state(records, as_of_day, seed=seed)
        return self.predictor.predict_future_form(
            target, planned_tss, state, recovery_days=recovery_days, as_of=as_of_day
        )

    def generate_taper_plan(
        self,
        records: Sequence[ActivityRecord],
        race_date: date | str,
        taper_duration: int | None = None,
        target_tsb: float | None = None,
        strategy: TaperStrategy | None = None,
        volume_reduction: float | None = None,
        maintain_intensity: bool | None = None,
        as_of: date | str | None = None,
        seed: LoadSeed | None = None,
    ) -> TaperPlan:
        """Generate a taper plan from the current state of ``records``."""
        as_of_day = parse_date(as_of, "as_of") or date.today()
        race = parse_date(race_date, "race_date")
        state = self.current_state(records, as_of_day, seed=seed)
        return self.predictor.generate_taper_plan(
            race,
            state,
            taper_duration=taper_duration,
            target_tsb=target_tsb,
            strategy=strategy,
            volume_reduction=volume_reduction,
            maintain_intensity=maintain_intensity,
            as_of=as_of_day,
        )

    def estimate_recovery_time(
        self,
        records: Sequence[ActivityRecord],
        target_zone: FormZone = FormZone.OPTIMAL_RACE,
        rest: bool = True,
        as_of: date | str | None = None,
        seed: LoadSeed | None = None,
    ) -> RecoveryEstimate:
        """Estimate recovery time from the current state of ``records``."""
        as_of_day = parse_date(as_of, "as_of") or date.today()
        state = self.current_state(records, as_of_day, seed=seed)
        return self.predictor.estimate_recovery_time(state, FormZone(target_zone), rest)

    def simulate_scenario(
        self,
        records: Sequence[ActivityRecord],
        days: int | None,
        daily_tss: PlannedTSS,
        as_of: date | str | None = None,
        seed: LoadSeed | None = None,
    ) -> list[ScenarioDay]:
        """Simulate a load plan starting the day after ``as_of``."""
        as_of_day = parse_date(as_of, "as_of") or date.today()
        state = self.current_state(records, as_of_day, seed=seed)
        return self.predictor.simulate_scenario(
            state, days, daily_tss, start_date=add_days(as_of_day, 1)
        )
