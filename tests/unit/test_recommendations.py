"""Unit tests for form-based training recommendations."""

from datetime import date, timedelta

import pytest

from training_form.analysis import FormPredictor, FormRecommendationEngine
from training_form.models import (
    FormZone,
    Level,
    LoadState,
    RecommendationContext,
    TrendDirection,
    UpcomingRace,
)
from training_form.settings import Settings

TODAY = date(2024, 6, 1)


@pytest.fixture
def engine(settings: Settings) -> FormRecommendationEngine:
    """Provide a recommendation engine with default settings."""
    return FormRecommendationEngine(settings)


def context(zone: FormZone, tsb: float, ctl: float = 60, **kwargs) -> RecommendationContext:
    """Build a recommendation context at the given zone and TSB."""
    return RecommendationContext(
        current_zone=zone, current_tsb=tsb, current_ctl=ctl, current_atl=ctl - tsb, **kwargs
    )


class TestRecommendedTSS:
    """Test daily load ranges."""

    def test_productive_training_range(self):
        tss = FormRecommendationEngine.recommended_tss(60, FormZone.PRODUCTIVE_TRAINING)

        assert (tss.min, tss.max) == (42, 66)

    def test_overreached_range(self):
        tss = FormRecommendationEngine.recommended_tss(80, FormZone.OVERREACHED)

        assert (tss.min, tss.max) == (0, 24)

    def test_declining_trend_reduces_load(self):
        tss = FormRecommendationEngine.recommended_tss(60, FormZone.FRESH, declining=True)

        # round(48 * 0.9) = 43, round(78 * 0.9) = 70
        assert (tss.min, tss.max) == (43, 70)


class TestGenerateRecommendation:
    """Test zone-driven recommendations."""

    def test_overreached(self, engine: FormRecommendationEngine):
        rec = engine.generate_recommendation(context(FormZone.OVERREACHED, -40), on_date=TODAY)

        assert rec.date == TODAY
        assert rec.recommended_intensity == Level.VERY_LOW
        assert rec.recommended_volume == Level.VERY_LOW
        assert rec.guidance.primary.startswith("CRITICAL")
        assert "CRITICAL: Very high injury and illness risk" in rec.guidance.cautions
        assert "High-intensity intervals" in rec.avoid_workouts

    def test_optimal_race(self, engine: FormRecommendationEngine):
        rec = engine.generate_recommendation(context(FormZone.OPTIMAL_RACE, 15), on_date=TODAY)

        assert rec.recommended_intensity == Level.HIGH
        assert rec.recommended_volume == Level.LOW
        assert rec.avoid_workouts == []
        assert rec.guidance.secondary == ["Consider scheduling key workout or race"]
        assert rec.guidance.cautions == []

    def test_workout_types_follow_zone_profile(self, engine: FormRecommendationEngine):
        rec = engine.generate_recommendation(context(FormZone.MAINTENANCE, 0))

        expected = engine.classifier.zone_info(FormZone.MAINTENANCE, 60)
        assert rec.workout_types == expected.recommendations.workout_types

    def test_fresh_and_improving(self, engine: FormRecommendationEngine):
        rec = engine.generate_recommendation(
            context(FormZone.FRESH, 30, tsb_trend=TrendDirection.IMPROVING)
        )

        assert rec.guidance.primary == "Very fresh - can increase training load progressively"
        assert rec.guidance.secondary[0] == "Form is improving - recovery progressing well"
        assert rec.avoid_workouts == ["Complete rest (risk of detraining)"]

    def test_declining_downgrades_high_intensity(self, engine: FormRecommendationEngine):
        rec = engine.generate_recommendation(
            context(FormZone.FRESH, 30, tsb_trend=TrendDirection.DECLINING)
        )

        assert rec.recommended_intensity == Level.MODERATE
        assert rec.recommended_volume == Level.MODERATE
        assert rec.guidance.secondary[0] == "Form is declining - monitor for overtraining signs"

    def test_race_week_overrides_workouts(self, engine: FormRecommendationEngine):
        race = UpcomingRace(date=TODAY + timedelta(days=5), days_until=5)
        rec = engine.generate_recommendation(
            context(FormZone.MAINTENANCE, 5, upcoming_race=race), on_date=TODAY
        )

        assert rec.workout_types == ["Easy recovery", "Short race-pace efforts", "Shakeout runs"]
        assert rec.guidance.primary.startswith("Race in 5 days")

    def test_fatigued_before_race(self, engine: FormRecommendationEngine):
        race = UpcomingRace(date=TODAY + timedelta(days=12), days_until=12)
        rec = engine.generate_recommendation(
            context(FormZone.FATIGUED, -25, upcoming_race=race), on_date=TODAY
        )

        assert rec.workout_types == [
            "Moderate volume",
            "Race-pace practice",
            "Threshold maintenance",
        ]
        assert "May not recover in time for race - consider additional rest" in rec.guidance.cautions


class TestWeeklyRecommendations:
    """Test recommendations over a projected week."""

    def test_one_per_projected_day(self, settings: Settings, engine: FormRecommendationEngine):
        predictor = FormPredictor(settings, engine.classifier)
        projection = predictor.simulate_scenario(
            LoadState(ctl=60, atl=90), 7, 0, start_date=TODAY
        )
        race = UpcomingRace(date=TODAY + timedelta(days=10), days_until=10)

        recommendations = engine.generate_weekly_recommendations(
            context(FormZone.FATIGUED, -30, upcoming_race=race), projection
        )

        assert [r.date for r in recommendations] == [d.date for d in projection]
        assert [r.current_zone for r in recommendations] == [d.zone for d in projection]
        # Race is 10 days after day 1 and 4 days after day 7
        assert recommendations[-1].guidance.primary.startswith("Race in 4 days")
