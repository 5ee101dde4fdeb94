"""Unit tests for the correlation of personal records with form."""

from datetime import date, timedelta

import pytest

from training_form.analysis import FormPerformanceAnalyzer, FormZoneClassifier
from training_form.exceptions import ValidationError
from training_form.models import (
    FormSnapshot,
    FormZone,
    PerformanceGoal,
    PerformanceRecord,
)
from training_form.settings import Settings

START = date(2024, 3, 1)
# CTL 60 keeps every zone at its canonical range
TSB_VALUES = [-25, -25, -10, 0, 5, 15, 15, 20, 30, 30]


@pytest.fixture
def analyzer(settings: Settings, classifier: FormZoneClassifier) -> FormPerformanceAnalyzer:
    """Provide an analyzer sharing the default classifier."""
    return FormPerformanceAnalyzer(settings, classifier)


@pytest.fixture
def snapshots(classifier: FormZoneClassifier) -> list[FormSnapshot]:
    """Provide ten days of snapshots spanning every zone but overreached."""
    result = []
    for offset, tsb in enumerate(TSB_VALUES):
        info = classifier.classify(tsb, 60)
        result.append(
            FormSnapshot(
                date=START + timedelta(days=offset),
                tss=60,
                ctl=60,
                atl=60 - tsb,
                tsb=tsb,
                zone=info.zone,
                zone_info=info,
            )
        )
    return result


@pytest.fixture
def performance_records() -> list[PerformanceRecord]:
    """Provide three records in optimal race form, one in maintenance and one without a snapshot."""
    return [
        PerformanceRecord(date=START + timedelta(days=3), category="10k", improvement=1.0),
        PerformanceRecord(date=START + timedelta(days=5), category="5k", improvement=4.0),
        PerformanceRecord(date=START + timedelta(days=6), category="20min_power", improvement=5.0),
        PerformanceRecord(date=START + timedelta(days=7), category="5k", improvement=6.0),
        PerformanceRecord(date=START + timedelta(days=20), category="5k", improvement=2.0),
    ]


class TestAnalyzeCorrelation:
    """Test the full correlation over a period."""

    def test_performance_by_zone(self, analyzer, snapshots, performance_records):
        result = analyzer.analyze_correlation(
            snapshots, performance_records, START, START + timedelta(days=9)
        )

        optimal = result.performance_by_zone[FormZone.OPTIMAL_RACE]
        assert optimal.total_prs == 3
        assert optimal.days_in_zone == 3
        assert optimal.pr_density == 1.0
        assert optimal.average_tsb == pytest.approx(16.7)
        assert [p.category for p in optimal.prs] == ["5k", "20min_power", "5k"]

        maintenance = result.performance_by_zone[FormZone.MAINTENANCE]
        assert maintenance.total_prs == 1
        assert maintenance.pr_density == 0.5
        assert result.performance_by_zone[FormZone.OVERREACHED].days_in_zone == 0
        assert result.period.days == 9

    def test_optimal_zones_ranked(self, analyzer, snapshots, performance_records):
        result = analyzer.analyze_correlation(
            snapshots, performance_records, START, START + timedelta(days=9)
        )

        assert [z.zone for z in result.optimal_zones[:2]] == [
            FormZone.OPTIMAL_RACE,
            FormZone.MAINTENANCE,
        ]
        assert result.optimal_zones[0].score == 60
        assert result.optimal_zones[1].score == 53
        assert "(good performance zone)" in result.optimal_zones[0].reasoning
        assert result.optimal_zones[-1].reasoning.startswith("No PRs achieved")

    def test_tsb_correlation(self, analyzer, snapshots, performance_records):
        """Test that larger improvements on fresher days give a strong positive r."""
        result = analyzer.analyze_correlation(
            snapshots, performance_records, START, START + timedelta(days=9)
        )

        correlation = result.tsb_correlation
        assert correlation.coefficient == pytest.approx(0.98)
        assert correlation.significance == "strong"
        assert 0 < correlation.p_value < 0.05
        assert (correlation.optimal_tsb_range.min, correlation.optimal_tsb_range.max) == (5.0, 20.0)

    def test_insights_and_recommendations(self, analyzer, snapshots, performance_records):
        result = analyzer.analyze_correlation(
            snapshots, performance_records, START, START + timedelta(days=9)
        )

        assert result.insights == [
            "Best performance in optimal_race zone with 3 PRs",
            "Strong correlation (0.98) between TSB and performance",
            "Optimal TSB range: 5.0 to 20.0",
            "Peak performance occurs with optimal race freshness, not excessive rest",
        ]
        assert result.recommendations == [
            "Target TSB 10-25 for key performances",
            "Plan taper to reach optimal zone on race day",
            "Plan important workouts/races when TSB is 5.0 to 20.0",
        ]

    def test_records_outside_period_ignored(self, analyzer, snapshots, performance_records):
        result = analyzer.analyze_correlation(
            snapshots, performance_records, START, START + timedelta(days=5)
        )

        total = sum(z.total_prs for z in result.performance_by_zone.values())
        assert total == 2
        assert result.performance_by_zone[FormZone.FRESH].days_in_zone == 0

    def test_no_records(self, analyzer, snapshots):
        result = analyzer.analyze_correlation(snapshots, [], START, START + timedelta(days=9))

        assert result.insights == ["Insufficient data for correlation analysis"]
        assert result.optimal_zones == []
        assert set(result.performance_by_zone) == set(FormZone)
        assert result.tsb_correlation.coefficient == 0
        assert result.tsb_correlation.optimal_tsb_range.min == 10.0

    def test_constant_improvement_has_no_correlation(self, analyzer, snapshots):
        records = [
            PerformanceRecord(date=START + timedelta(days=d), category="5k", improvement=3.0)
            for d in (3, 5, 8)
        ]

        correlation = analyzer.tsb_correlation(snapshots, records)

        assert correlation.coefficient == 0
        assert correlation.significance == "none"
        assert correlation.p_value is None

    def test_inverted_period_rejected(self, analyzer, snapshots):
        with pytest.raises(ValidationError) as exc_info:
            analyzer.analyze_correlation(snapshots, [], START + timedelta(days=1), START)

        assert exc_info.value.parameter == "start_date"


class TestOptimalTSBForGoal:
    """Test goal-specific TSB ranges."""

    def test_race_goal(self, analyzer, snapshots, performance_records):
        result = analyzer.find_optimal_tsb_for_goal(snapshots, performance_records, PerformanceGoal.RACE)

        assert (result.optimal_tsb_range.min, result.optimal_tsb_range.max) == (10.0, 20.0)
        assert result.optimal_zone == FormZone.OPTIMAL_RACE
        assert result.pr_count == 4
        assert result.confidence == 40
        assert result.success_rate == 75.0
        assert result.average_improvement == 4.0

    def test_training_breakthrough_goal(self, analyzer, snapshots, performance_records):
        result = analyzer.find_optimal_tsb_for_goal(
            snapshots, performance_records, "training_breakthrough"
        )

        assert (result.optimal_tsb_range.min, result.optimal_tsb_range.max) == (5.0, 10.0)
        assert result.optimal_zone == FormZone.MAINTENANCE
        assert result.success_rate == 0

    def test_no_matches_use_classifier_range(self, settings: Settings, snapshots):
        """Test that the default target follows a customized classifier."""
        classifier = FormZoneClassifier(settings, overrides={FormZone.OPTIMAL_RACE: (5, 25)})
        analyzer = FormPerformanceAnalyzer(settings, classifier)

        result = analyzer.find_optimal_tsb_for_goal(snapshots, [])

        assert (result.optimal_tsb_range.min, result.optimal_tsb_range.max) == (5, 25)
        assert result.confidence == 0


class TestPerformanceProbability:
    """Test per-zone record probabilities."""

    def test_probability_by_zone(self, analyzer, snapshots, performance_records):
        result = analyzer.calculate_performance_probability(snapshots, performance_records)

        optimal = result[FormZone.OPTIMAL_RACE]
        assert optimal.pr_probability == 100.0
        assert optimal.prs_per_week == 7.0
        assert optimal.quality_score == 200

        maintenance = result[FormZone.MAINTENANCE]
        assert maintenance.pr_probability == 50.0
        assert maintenance.prs_per_week == 3.5
        assert maintenance.quality_score == 60

        assert result[FormZone.OVERREACHED].pr_probability == 0
        assert result[FormZone.FRESH].quality_score == 0
