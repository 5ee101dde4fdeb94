"""
Form prediction engine.

Projects the load filter forward under a planned training load. Provides
future form prediction, taper plan generation, recovery time estimates and
what-if scenario simulation. All projections share one simulation path so
that a given plan always yields the same trajectory.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date

import numpy as np

from ..constants import FormZoneThresholds, PredictionConstants, TaperConstants
from ..exceptions import ValidationError
from ..models import (
    FormZone,
    LoadState,
    Prediction,
    PredictionAssumptions,
    PredictionDetails,
    RecoveryEstimate,
    ScenarioDay,
    TaperCurrentState,
    TaperDay,
    TaperPlan,
    TaperStrategy,
    TaperStrategyInfo,
    TaperTargetState,
)
from ..settings import Settings
from ..utils import add_days, round1, round_half_up
from .load import simulate, tsb_from
from .zones import FormZoneClassifier

logger = logging.getLogger(__name__)

PlannedTSS = float | Sequence[float]


def normalize_planned_tss(
    planned_tss: PlannedTSS, days: int, recovery_days: Iterable[int] = ()
) -> list[float]:
    """
    Turn a scalar or per-day planned load into exactly ``days`` values.

    Args:
        planned_tss: Scalar broadcast to every day, or a per-day sequence
            that is truncated or zero-padded to the horizon
        days: Horizon length
        recovery_days: Zero-based day indices forced to TSS 0

    Returns:
        Planned TSS per day
    """
    if isinstance(planned_tss, (int, float)):
        daily = [float(planned_tss)] * days
    else:
        daily = [float(tss) for tss in planned_tss][:days]
        daily.extend([0.0] * (days - len(daily)))

    for index in recovery_days:
        if 0 <= index < days:
            daily[index] = 0.0
    return daily


class FormPredictor:
    """
    Projects form forward in time.

    Uses the injected zone classifier for every classification so custom
    thresholds apply to predictions exactly as they do to history.
    """

    def __init__(self, settings: Settings, classifier: FormZoneClassifier | None = None):
        """
        Initialize the predictor.

        Args:
            settings: Application settings (time constants, taper defaults)
            classifier: Shared zone classifier
        """
        self.settings = settings
        self.classifier = classifier or FormZoneClassifier(settings)
        self.logger = logging.getLogger(__name__)

    def _project(self, current: LoadState, daily_tss: Sequence[float]) -> list[tuple[float, float]]:
        return simulate(
            current.ctl, current.atl, daily_tss, self.settings.ctl_days, self.settings.atl_days
        )

    # --- Prediction ---------------------------------------------------------

    def predict_future_form(
        self,
        target_date: date,
        planned_tss: PlannedTSS,
        current: LoadState,
        recovery_days: Iterable[int] = (),
        as_of: date | None = None,
    ) -> Prediction:
        """
        Predict TSB on a future date under a planned load.

        Feasibility of the plan is the caller's responsibility; nothing is
        clamped.

        Args:
            target_date: Date to predict; must be after ``as_of``
            planned_tss: Scalar daily TSS or per-day plan
            current: Current CTL/ATL/TSB
            recovery_days: Zero-based day indices forced to rest
            as_of: Date of the current state (defaults to today)

        Returns:
            Prediction for the target date

        Raises:
            ValidationError: If ``target_date`` is not after ``as_of``
        """
        as_of = as_of or date.today()
        days_ahead = (target_date - as_of).days
        if days_ahead < 1:
            raise ValidationError(
                "target_date",
                f"{target_date} is not after {as_of}",
                "a future date in YYYY-MM-DD format",
            )

        daily_tss = normalize_planned_tss(planned_tss, days_ahead, recovery_days)
        final_ctl, final_atl = self._project(current, daily_tss)[-1]
        predicted_tsb = tsb_from(final_ctl, final_atl)
        predicted_zone = self.classifier.classify_zone(predicted_tsb, final_ctl)

        return Prediction(
            target_date=target_date,
            days_ahead=days_ahead,
            predicted_tsb=predicted_tsb,
            predicted_zone=predicted_zone,
            confidence=self.prediction_confidence(days_ahead, daily_tss),
            assumptions=PredictionAssumptions(
                planned_daily_tss=daily_tss,
                current_ctl=current.ctl,
                current_atl=current.atl,
                current_tsb=current.tsb,
            ),
            details=PredictionDetails(
                projected_ctl=round1(final_ctl),
                projected_atl=round1(final_atl),
                expected_fatigue_decay=round1(current.atl - final_atl),
                expected_fitness_decay=round1(current.ctl - final_ctl),
            ),
            recommendations=self._prediction_recommendations(
                predicted_tsb, predicted_zone, current.tsb, days_ahead
            ),
        )

    @staticmethod
    def prediction_confidence(days: int, daily_tss: Sequence[float]) -> int:
        """
        Confidence of a projection in percent.

        Decays by 5% per day of horizon and loses up to 20 points for a
        highly variable plan. Never below 30.
        """
        base = 100 * PredictionConstants.CONFIDENCE_DECAY**days
        variance = float(np.var(daily_tss)) if len(daily_tss) else 0.0
        penalty = min(
            PredictionConstants.MAX_VARIABILITY_PENALTY,
            variance / PredictionConstants.VARIANCE_PENALTY_DIVISOR,
        )
        return max(PredictionConstants.MIN_CONFIDENCE, round_half_up(base - penalty))

    @staticmethod
    def _prediction_recommendations(
        predicted_tsb: float, predicted_zone: FormZone, current_tsb: float, days_ahead: int
    ) -> list[str]:
        recommendations = []
        if predicted_zone == FormZone.OPTIMAL_RACE:
            recommendations.append("Predicted to reach optimal race zone")
        elif predicted_zone == FormZone.OVERREACHED:
            recommendations.append("WARNING: Predicted overreaching - reduce planned load")
        elif predicted_zone == FormZone.FRESH and days_ahead < 7:
            recommendations.append("May be too fresh - consider adding light training")

        if abs(predicted_tsb - current_tsb) > PredictionConstants.LARGE_FORM_CHANGE:
            recommendations.append("Large form change predicted - monitor closely")
        return recommendations

    # --- Taper --------------------------------------------------------------

    @staticmethod
    def taper_load(
        duration: int, peak_tss: float, volume_reduction: float, strategy: TaperStrategy
    ) -> list[float]:
        """
        Planned daily TSS for a taper.

        With progress ``p = day / duration`` and reduction ``r`` as a fraction:
        linear is ``1 - p*r``, exponential is ``(1 - r)^p`` and step holds
        three plateaus at ``1 - r/3``, ``1 - 2r/3`` and ``1 - r``.

        Args:
            duration: Taper length in days
            peak_tss: Notional peak daily load
            volume_reduction: Reduction at the end of the taper, in percent
            strategy: Shape of the reduction

        Returns:
            Planned TSS for each taper day
        """
        reduction = volume_reduction / 100
        first_step, second_step = TaperConstants.STEP_BOUNDARIES
        loads = []
        for day in range(duration):
            progress = day / duration
            if strategy == TaperStrategy.LINEAR:
                factor = 1 - progress * reduction
            elif strategy == TaperStrategy.EXPONENTIAL:
                factor = (1 - reduction) ** progress
            elif progress < first_step:
                factor = 1 - reduction / 3
            elif progress < second_step:
                factor = 1 - 2 * reduction / 3
            else:
                factor = 1 - reduction
            loads.append(peak_tss * factor)
        return loads

    def generate_taper_plan(
        self,
        race_date: date,
        current: LoadState,
        taper_duration: int | None = None,
        target_tsb: float | None = None,
        strategy: TaperStrategy | None = None,
        volume_reduction: float | None = None,
        maintain_intensity: bool | None = None,
        as_of: date | None = None,
    ) -> TaperPlan:
        """
        Generate a day-by-day pre-race taper.

        The schedule ends on race day. Days between ``as_of`` and the start
        of the taper are simulated at the baseline load, and a taper longer
        than the time left before the race is shortened with a warning.
        Unset options fall back to ``settings.taper``.

        Args:
            race_date: Race date
            current: Current CTL/ATL/TSB
            taper_duration: Taper length in days (1-42)
            target_tsb: TSB to arrive at on race day
            strategy: linear, exponential or step
            volume_reduction: Load reduction at the end of the taper, percent
            maintain_intensity: Keep key intensity sessions in the plan
            as_of: Date of the current state (defaults to today)

        Returns:
            TaperPlan with schedule, warnings and recommendations

        Raises:
            ValidationError: If an option is out of range or the race is past
        """
        defaults = self.settings.taper
        duration = defaults.duration_days if taper_duration is None else taper_duration
        target_tsb = defaults.target_tsb if target_tsb is None else target_tsb
        strategy = TaperStrategy(strategy or defaults.strategy)
        reduction = defaults.volume_reduction if volume_reduction is None else volume_reduction
        if maintain_intensity is None:
            maintain_intensity = defaults.maintain_intensity
        as_of = as_of or date.today()

        if not TaperConstants.MIN_DURATION_DAYS <= duration <= TaperConstants.MAX_DURATION_DAYS:
            raise ValidationError(
                "taper_duration",
                f"{duration} days is out of range",
                f"{TaperConstants.MIN_DURATION_DAYS}-{TaperConstants.MAX_DURATION_DAYS} days",
            )
        if not 0 <= reduction <= 100:
            raise ValidationError("volume_reduction", f"{reduction} is out of range", "0-100 percent")
        if race_date <= as_of:
            raise ValidationError(
                "race_date", f"{race_date} is not after {as_of}", "a date after the current state"
            )

        warnings = []
        days_to_race = (race_date - as_of).days
        if duration > days_to_race:
            warnings.append(
                f"Race is {days_to_race} days away - taper shortened from {duration} to "
                f"{days_to_race} days"
            )
            duration = days_to_race

        # Days between the current state and the taper are held at the baseline load
        taper_start = add_days(race_date, -duration)
        lead_in_days = (taper_start - as_of).days
        current_zone = self.classifier.classify_zone(current.tsb, current.ctl)
        peak_tss = current.ctl * TaperConstants.PEAK_LOAD_FACTOR
        loads = self.taper_load(duration, peak_tss, reduction, strategy)
        projection = self._project(current, [peak_tss] * lead_in_days + loads)[lead_in_days:]

        schedule = []
        for day_of_taper, (load, (ctl, atl)) in enumerate(zip(loads, projection), start=1):
            tsb = tsb_from(ctl, atl)
            schedule.append(
                TaperDay(
                    date=add_days(taper_start, day_of_taper),
                    day_of_taper=day_of_taper,
                    planned_tss=round_half_up(load),
                    reduction_from_peak=round1((peak_tss - load) / peak_tss * 100)
                    if peak_tss > 0
                    else 0.0,
                    predicted_tsb=tsb,
                    predicted_zone=self.classifier.classify_zone(tsb, ctl),
                    notes=self._taper_day_notes(duration - day_of_taper),
                )
            )

        self.logger.debug(
            f"Generated {strategy.value} taper of {duration} days for {race_date}, "
            f"race-day TSB {schedule[-1].predicted_tsb}"
        )
        return TaperPlan(
            race_date=race_date,
            taper_start_date=taper_start,
            taper_duration=duration,
            current_state=TaperCurrentState(
                date=as_of, ctl=current.ctl, atl=current.atl, tsb=current.tsb, zone=current_zone
            ),
            target_state=TaperTargetState(
                target_tsb=target_tsb,
                target_zone=FormZone.OPTIMAL_RACE,
                target_ctl=round1(current.ctl * TaperConstants.TARGET_CTL_RETENTION),
            ),
            schedule=schedule,
            strategy=TaperStrategyInfo(
                type=strategy,
                volume_reduction=reduction,
                intensity_maintenance=maintain_intensity,
                critical_workouts=self._critical_workouts(duration, maintain_intensity),
            ),
            warnings=warnings + self._taper_warnings(current, target_tsb, duration),
            recommendations=self._taper_recommendations(
                current_zone, target_tsb, strategy, duration
            ),
        )

    @staticmethod
    def _taper_day_notes(days_from_race: int) -> str:
        if days_from_race == 0:
            return "Race day - minimal activity"
        if days_from_race <= 2:
            return "Final preparation - very light activity"
        if days_from_race <= 5:
            return "Late taper - reduced volume, maintain some intensity"
        if days_from_race <= 10:
            return "Mid taper - progressive volume reduction"
        return "Early taper - begin reducing volume"

    @staticmethod
    def _critical_workouts(duration: int, maintain_intensity: bool) -> list[str]:
        workouts = []
        if duration >= 14:
            workouts.append("Week 1: One race-pace workout")
            workouts.append("Week 2: Short threshold or race-pace efforts")
        elif duration >= 7:
            workouts.append("Week 1: One short high-intensity session")
        if maintain_intensity:
            workouts.append("Maintain intensity, reduce volume")
        return workouts

    @staticmethod
    def _taper_warnings(current: LoadState, target_tsb: float, duration: int) -> list[str]:
        warnings = []
        if current.ctl < TaperConstants.LOW_CTL_WARNING:
            warnings.append(
                "Current fitness (CTL) is low - consider building base before major race"
            )
        if current.tsb < TaperConstants.FATIGUED_TSB_WARNING:
            warnings.append("Currently in fatigued state - may need longer taper")
        if duration < TaperConstants.SHORT_TAPER_WARNING_DAYS:
            warnings.append("Taper duration is short - may not provide adequate recovery")
        if abs(target_tsb - current.tsb) > TaperConstants.LARGE_TSB_CHANGE_WARNING:
            warnings.append("Large TSB change required - taper may be challenging")
        return warnings

    @staticmethod
    def _taper_recommendations(
        current_zone: FormZone, target_tsb: float, strategy: TaperStrategy, duration: int
    ) -> list[str]:
        recommendations = [
            f"Using {strategy.value} taper strategy over {duration} days",
            f"Target TSB of {target_tsb} for optimal race readiness",
        ]
        if current_zone in (FormZone.FATIGUED, FormZone.OVERREACHED):
            recommendations.append("Prioritize recovery in early taper phase")
        recommendations.extend(
            [
                "Maintain intensity while reducing volume",
                "Focus on quality rest and nutrition",
                "Include 1-2 short race-pace efforts",
            ]
        )
        return recommendations

    # --- Recovery -----------------------------------------------------------

    def estimate_recovery_time(
        self,
        current: LoadState,
        target_zone: FormZone = FormZone.OPTIMAL_RACE,
        rest: bool = True,
        horizon_days: int = PredictionConstants.RECOVERY_HORIZON_DAYS,
    ) -> RecoveryEstimate:
        """
        Estimate days of rest or light training needed to reach a target zone.

        Complete rest uses TSS 0; active recovery uses 30% of CTL with a
        floor of 10 TSS. Both searches share the same horizon.

        Args:
            current: Current CTL/ATL/TSB
            target_zone: Zone to recover into
            rest: Complete rest when True, active recovery otherwise
            horizon_days: Maximum number of days to simulate

        Returns:
            RecoveryEstimate; ``reached`` is False if the horizon ran out
        """
        target_range = self.classifier.target_range(target_zone, current.ctl)
        recovery_tss = 0.0
        if not rest:
            recovery_tss = max(
                current.ctl * PredictionConstants.ACTIVE_RECOVERY_CTL_FACTOR,
                PredictionConstants.ACTIVE_RECOVERY_MIN_TSS,
            )

        if current.tsb >= target_range.min:
            days, final_tsb, reached = 0, current.tsb, True
        else:
            days, final_tsb, reached = horizon_days, current.tsb, False
            projection = self._project(current, [recovery_tss] * horizon_days)
            for day, (ctl, atl) in enumerate(projection, start=1):
                final_tsb = tsb_from(ctl, atl)
                if final_tsb >= target_range.min:
                    days, reached = day, True
                    break

        daily_change = (final_tsb - current.tsb) / days if days else 0.0
        return RecoveryEstimate(
            target_zone=target_zone,
            estimated_days=days,
            reached=reached,
            rest=rest,
            recovery_tss=round1(recovery_tss),
            daily_tsb_change=round(daily_change, 2),
            target_tsb_range=target_range,
            recommendations=self._recovery_recommendations(current.tsb, days, rest, reached),
        )

    @staticmethod
    def _recovery_recommendations(
        current_tsb: float, days: int, rest: bool, reached: bool
    ) -> list[str]:
        if reached:
            recommendations = [f"Estimated {days} days to reach target form"]
        else:
            recommendations = [f"Target form not reached within {days} days at this load"]
        if rest:
            recommendations.append("Complete rest recommended for optimal recovery")
        else:
            recommendations.append("Active recovery with low-intensity work")
        if current_tsb < FormZoneThresholds.OVERREACHED_REFERENCE:
            recommendations.append("Severely overreached - prioritize sleep and nutrition")
        if days > PredictionConstants.EXTENDED_RECOVERY_DAYS:
            recommendations.append("Extended recovery period - consider consulting coach")
        return recommendations

    # --- Scenarios ----------------------------------------------------------

    def simulate_scenario(
        self,
        current: LoadState,
        days: int | None,
        daily_tss: PlannedTSS,
        start_date: date | None = None,
    ) -> list[ScenarioDay]:
        """
        Day-by-day trajectory of a what-if load plan.

        Args:
            current: Starting CTL/ATL/TSB
            days: Horizon; may be None when ``daily_tss`` is a sequence
            daily_tss: Scalar daily TSS or per-day plan
            start_date: Date of day 1 (defaults to today)

        Returns:
            One ScenarioDay per simulated day

        Raises:
            ValidationError: If the horizon is not positive
        """
        if days is None and not isinstance(daily_tss, (int, float)):
            days = len(daily_tss)
        if days is None or days < 1:
            raise ValidationError("days", f"horizon {days} is not positive", "number of days >= 1")

        start_date = start_date or date.today()
        plan = normalize_planned_tss(daily_tss, days)
        return [
            ScenarioDay(
                day=day,
                date=add_days(start_date, day - 1),
                tss=tss,
                ctl=round1(ctl),
                atl=round1(atl),
                tsb=tsb_from(ctl, atl),
                zone=self.classifier.classify_zone(tsb_from(ctl, atl), ctl),
            )
            for day, (tss, (ctl, atl)) in enumerate(zip(plan, self._project(current, plan)), start=1)
        ]
