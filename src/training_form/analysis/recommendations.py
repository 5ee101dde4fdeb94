"""
Form-based training recommendations.

Turns the current form zone, fitness and TSB trend into a recommended daily
load range, intensity and volume classes, workout suggestions and guidance
text. An upcoming race overrides zone-based workout suggestions.
"""

import logging
from collections.abc import Sequence
from datetime import date

from ..models import (
    FormZone,
    Guidance,
    Level,
    RecommendationContext,
    ScenarioDay,
    TrainingRecommendation,
    TrendDirection,
    TSSRange,
    UpcomingRace,
)
from ..settings import Settings
from ..utils import round_half_up
from .zones import FormZoneClassifier

logger = logging.getLogger(__name__)

# Daily TSS range as a fraction of CTL
TSS_FRACTIONS: dict[FormZone, tuple[float, float]] = {
    FormZone.OVERREACHED: (0.0, 0.3),
    FormZone.FATIGUED: (0.3, 0.6),
    FormZone.PRODUCTIVE_TRAINING: (0.7, 1.1),
    FormZone.MAINTENANCE: (0.8, 1.2),
    FormZone.OPTIMAL_RACE: (0.7, 1.0),
    FormZone.FRESH: (0.8, 1.3),
}

ZONE_INTENSITY: dict[FormZone, Level] = {
    FormZone.OVERREACHED: Level.VERY_LOW,
    FormZone.FATIGUED: Level.VERY_LOW,
    FormZone.PRODUCTIVE_TRAINING: Level.LOW,
    FormZone.MAINTENANCE: Level.MODERATE,
    FormZone.OPTIMAL_RACE: Level.HIGH,
    FormZone.FRESH: Level.HIGH,
}

ZONE_VOLUME: dict[FormZone, Level] = {
    FormZone.OVERREACHED: Level.VERY_LOW,
    FormZone.FATIGUED: Level.LOW,
    FormZone.PRODUCTIVE_TRAINING: Level.MODERATE,
    FormZone.MAINTENANCE: Level.MODERATE,
    FormZone.OPTIMAL_RACE: Level.LOW,
    FormZone.FRESH: Level.HIGH,
}

PRIMARY_GUIDANCE: dict[FormZone, str] = {
    FormZone.OVERREACHED: (
        "CRITICAL: Immediate recovery required - complete rest or very light activity only"
    ),
    FormZone.FATIGUED: "High fatigue - reduce training load and focus on recovery",
    FormZone.PRODUCTIVE_TRAINING: (
        "Good training state - maintain steady training load for fitness gains"
    ),
    FormZone.MAINTENANCE: "Balanced state - good for consistent mixed training",
    FormZone.OPTIMAL_RACE: "Peak race readiness - excellent for key workouts or events",
    FormZone.FRESH: "Very fresh - good opportunity to build training volume",
}

DECLINING_LOAD_FACTOR = 0.9
RACE_WEEK_DAYS = 7
RACE_FORTNIGHT_DAYS = 14


class FormRecommendationEngine:
    """Generates form-aware training recommendations."""

    def __init__(self, settings: Settings, classifier: FormZoneClassifier | None = None):
        """
        Initialize the recommendation engine.

        Args:
            settings: Application settings
            classifier: Shared zone classifier, source of per-zone workout types
        """
        self.settings = settings
        self.classifier = classifier or FormZoneClassifier(settings)
        self.logger = logging.getLogger(__name__)

    def generate_recommendation(
        self, context: RecommendationContext, on_date: date | None = None
    ) -> TrainingRecommendation:
        """
        Recommend today's training from the current form.

        Args:
            context: Current zone, load values, TSB trend and optional race
            on_date: Date of the recommendation (defaults to today)

        Returns:
            TrainingRecommendation
        """
        zone = context.current_zone
        declining = context.tsb_trend == TrendDirection.DECLINING

        return TrainingRecommendation(
            date=on_date or date.today(),
            current_zone=zone,
            recommended_tss=self.recommended_tss(context.current_ctl, zone, declining),
            recommended_intensity=self._intensity(zone, declining),
            recommended_volume=self._volume(zone, declining),
            workout_types=self._workout_types(zone, context.current_ctl, context.upcoming_race),
            avoid_workouts=self._avoid_workouts(zone),
            guidance=Guidance(
                primary=self._primary_guidance(zone, context.tsb_trend, context.upcoming_race),
                secondary=self._secondary_guidance(zone, context.tsb_trend),
                cautions=self._cautions(zone, context.upcoming_race),
            ),
        )

    def generate_weekly_recommendations(
        self, context: RecommendationContext, projection: Sequence[ScenarioDay]
    ) -> list[TrainingRecommendation]:
        """
        One recommendation per projected day.

        Args:
            context: Base context; zone, TSB and load values are replaced per day
            projection: Simulated days, e.g. from ``FormPredictor.simulate_scenario``

        Returns:
            Recommendations dated like the projected days
        """
        recommendations = []
        for day in projection:
            race = context.upcoming_race
            if race is not None:
                race = race.model_copy(update={"days_until": max(0, (race.date - day.date).days)})
            day_context = context.model_copy(
                update={
                    "current_zone": day.zone,
                    "current_tsb": day.tsb,
                    "current_ctl": day.ctl,
                    "current_atl": day.atl,
                    "upcoming_race": race,
                }
            )
            recommendations.append(self.generate_recommendation(day_context, on_date=day.date))
        return recommendations

    @staticmethod
    def recommended_tss(ctl: float, zone: FormZone, declining: bool = False) -> TSSRange:
        """Daily TSS range for a zone, reduced by 10% while form is declining."""
        low, high = TSS_FRACTIONS[zone]
        factor = DECLINING_LOAD_FACTOR if declining else 1.0
        return TSSRange(
            min=round_half_up(round_half_up(ctl * low) * factor),
            max=round_half_up(round_half_up(ctl * high) * factor),
        )

    @staticmethod
    def _intensity(zone: FormZone, declining: bool) -> Level:
        intensity = ZONE_INTENSITY[zone]
        if declining and intensity == Level.HIGH:
            return Level.MODERATE
        return intensity

    @staticmethod
    def _volume(zone: FormZone, declining: bool) -> Level:
        volume = ZONE_VOLUME[zone]
        if declining and volume == Level.HIGH:
            return Level.MODERATE
        return volume

    def _workout_types(
        self, zone: FormZone, ctl: float, upcoming_race: UpcomingRace | None
    ) -> list[str]:
        if upcoming_race is not None:
            if upcoming_race.days_until <= RACE_WEEK_DAYS:
                return ["Easy recovery", "Short race-pace efforts", "Shakeout runs"]
            if upcoming_race.days_until <= RACE_FORTNIGHT_DAYS:
                return ["Moderate volume", "Race-pace practice", "Threshold maintenance"]
        return list(self.classifier.zone_info(zone, ctl).recommendations.workout_types)

    @staticmethod
    def _avoid_workouts(zone: FormZone) -> list[str]:
        if zone in (FormZone.OVERREACHED, FormZone.FATIGUED):
            return ["High-intensity intervals", "Long runs", "Hard efforts"]
        if zone == FormZone.FRESH:
            return ["Complete rest (risk of detraining)"]
        return []

    @staticmethod
    def _primary_guidance(
        zone: FormZone, trend: TrendDirection, upcoming_race: UpcomingRace | None
    ) -> str:
        if upcoming_race is not None and upcoming_race.days_until <= RACE_WEEK_DAYS:
            return (
                f"Race in {upcoming_race.days_until} days - Final taper phase, "
                "prioritize rest and short efforts"
            )
        if zone == FormZone.FRESH and trend == TrendDirection.IMPROVING:
            return "Very fresh - can increase training load progressively"
        return PRIMARY_GUIDANCE[zone]

    @staticmethod
    def _secondary_guidance(zone: FormZone, trend: TrendDirection) -> list[str]:
        guidance = []
        if trend == TrendDirection.DECLINING:
            guidance.append("Form is declining - monitor for overtraining signs")
        elif trend == TrendDirection.IMPROVING:
            guidance.append("Form is improving - recovery progressing well")

        if zone == FormZone.PRODUCTIVE_TRAINING:
            guidance.append("Building fitness - consistent training yielding adaptations")
        elif zone == FormZone.OPTIMAL_RACE:
            guidance.append("Consider scheduling key workout or race")
        return guidance

    @staticmethod
    def _cautions(zone: FormZone, upcoming_race: UpcomingRace | None) -> list[str]:
        cautions = []
        if zone == FormZone.OVERREACHED:
            cautions.append("CRITICAL: Very high injury and illness risk")
            cautions.append("Consider consulting coach or medical professional")
        elif zone == FormZone.FATIGUED:
            cautions.append("Elevated injury risk - avoid hard efforts")
            if upcoming_race is not None and upcoming_race.days_until <= RACE_FORTNIGHT_DAYS:
                cautions.append("May not recover in time for race - consider additional rest")
        return cautions
