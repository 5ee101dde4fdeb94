"""Unit tests for daily aggregation and the recursive load filter."""

from datetime import date, timedelta

import pytest

from training_form.analysis import (
    aggregate_daily,
    compute_load_series,
    fill_missing_dates,
    seed_from_snapshots,
    simulate,
    tsb_from,
)
from training_form.exceptions import InvalidDataError, ValidationError
from training_form.metrics import StressScorer
from training_form.models import DailyStress, LoadSeed
from training_form.settings import Settings

START = date(2024, 1, 1)


def daily_series(tss_values: list[float], start: date = START) -> list[DailyStress]:
    """Build a gap-free daily series from TSS values."""
    return [
        DailyStress(date=start + timedelta(days=i), total_tss=tss, activity_count=1 if tss else 0)
        for i, tss in enumerate(tss_values)
    ]


class TestAggregateDaily:
    """Test grouping of scored activities into calendar days."""

    def test_same_day_activities_summed(self, settings: Settings, record_factory):
        """Test that two activities on one day are summed."""
        scorer = StressScorer(settings)
        stresses = scorer.score_many(
            [
                record_factory(START, activity_id=1),
                record_factory(START, activity_id=2, activity_type="cycling"),
                record_factory(START + timedelta(days=2), activity_id=3),
            ]
        )

        daily = aggregate_daily(stresses)

        assert [d.date for d in daily] == [START, START + timedelta(days=2)]
        assert daily[0].total_tss == pytest.approx(130)
        assert daily[0].activity_count == 2
        assert [a.activity_id for a in daily[0].activities] == [1, 2]

    def test_output_sorted_by_date(self, settings: Settings, record_factory):
        """Test that input order does not matter."""
        scorer = StressScorer(settings)
        stresses = scorer.score_many(
            [
                record_factory(START + timedelta(days=5), activity_id=1),
                record_factory(START, activity_id=2),
            ]
        )

        daily = aggregate_daily(stresses)

        assert [d.date for d in daily] == [START, START + timedelta(days=5)]

    def test_empty_input(self):
        """Test that no activities produce no days."""
        assert aggregate_daily([]) == []


class TestFillMissingDates:
    """Test gap filling over an analysis window."""

    def test_missing_middle_day_inserted(self):
        """Test that a missing day becomes a zero entry with count 0."""
        daily = [
            DailyStress(date=START, total_tss=50, activity_count=1),
            DailyStress(date=START + timedelta(days=2), total_tss=70, activity_count=1),
        ]

        filled = fill_missing_dates(daily, START, START + timedelta(days=2))

        assert len(filled) == 3
        assert filled[1].date == START + timedelta(days=1)
        assert filled[1].total_tss == 0
        assert filled[1].activity_count == 0
        assert filled[1].activities == []

    def test_idempotent(self):
        """Test that filling a gap-free series returns the same series."""
        daily = [DailyStress(date=START, total_tss=50, activity_count=1)]
        end = START + timedelta(days=6)

        once = fill_missing_dates(daily, START, end)
        twice = fill_missing_dates(once, START, end)

        assert twice == once

    def test_entries_outside_window_dropped(self):
        """Test that days outside the window are not returned."""
        daily = daily_series([10, 20, 30, 40])

        filled = fill_missing_dates(daily, START + timedelta(days=1), START + timedelta(days=2))

        assert [d.total_tss for d in filled] == [20, 30]

    def test_single_day_window(self):
        """Test a window of one day."""
        filled = fill_missing_dates([], START, START)

        assert len(filled) == 1
        assert filled[0].date == START

    def test_start_after_end_rejected(self):
        """Test that an inverted window is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            fill_missing_dates([], START + timedelta(days=1), START)

        assert exc_info.value.parameter == "start_date"


class TestLoadFilter:
    """Test the CTL/ATL recursion."""

    def test_single_step_matches_recursion(self):
        """Test one day against the closed-form update."""
        points = compute_load_series(daily_series([100]))

        assert points[0].ctl == pytest.approx(round(100 / 42, 1))
        assert points[0].atl == pytest.approx(round(100 / 7, 1))

    def test_steady_state_decay_over_ctl_window(self):
        """Test that 42 rest days from CTL=ATL=100 leave CTL between 30 and 40."""
        points = compute_load_series(daily_series([0] * 42), seed=LoadSeed(ctl=100, atl=100))

        assert 30 < points[-1].ctl < 40
        assert points[-1].atl < 1

    def test_tsb_is_rounded_difference(self):
        """Test that every point satisfies tsb == round1(ctl - atl)."""
        tss = [0, 120, 80, 0, 0, 150, 60, 45, 0, 200, 30, 0, 90, 110]
        points = compute_load_series(daily_series(tss), seed=LoadSeed(ctl=37.3, atl=52.8))

        for point in points:
            assert point.tsb == round(point.ctl - point.atl, 1)

    def test_training_block_builds_fatigue(self):
        """Test that a hard week from CTL=ATL=60 drives ATL above CTL."""
        points = compute_load_series(daily_series([100] * 7), seed=LoadSeed(ctl=60, atl=60))

        assert points[6].atl > points[6].ctl
        assert points[-1].tsb < 0
        assert points[-1].ctl == pytest.approx(66.2, abs=0.1)
        assert points[-1].atl == pytest.approx(86.4, abs=0.1)

    def test_recursion_uses_unrounded_values(self):
        """Test that rounding is applied only to the surfaced values."""
        tss = [37, 41, 0, 55, 63, 12, 0]
        ctl = atl = 0.0
        for value in tss:
            ctl += (value - ctl) / 42
            atl += (value - atl) / 7

        points = compute_load_series(daily_series(tss))

        assert points[-1].ctl == pytest.approx(ctl, abs=0.05)
        assert points[-1].atl == pytest.approx(atl, abs=0.05)

    def test_custom_time_constants(self):
        """Test that the time constants are honored."""
        points = compute_load_series(daily_series([100]), ctl_days=10, atl_days=2)

        assert points[0].ctl == pytest.approx(10.0)
        assert points[0].atl == pytest.approx(50.0)

    @pytest.mark.parametrize("parameter", ["ctl_days", "atl_days"])
    def test_non_positive_time_constant_rejected(self, parameter: str):
        """Test that time constants below one day are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            compute_load_series(daily_series([50]), **{parameter: 0})

        assert exc_info.value.parameter == parameter

    def test_gapped_series_rejected(self):
        """Test that the filter refuses a series with a missing day."""
        daily = [
            DailyStress(date=START, total_tss=50),
            DailyStress(date=START + timedelta(days=2), total_tss=50),
        ]

        with pytest.raises(InvalidDataError):
            compute_load_series(daily)

    def test_unordered_series_rejected(self):
        """Test that the filter refuses an unordered series."""
        daily = list(reversed(daily_series([10, 20])))

        with pytest.raises(InvalidDataError):
            compute_load_series(daily)

    def test_empty_series(self):
        """Test that an empty series yields no points."""
        assert compute_load_series([]) == []


class TestSeedsAndSimulation:
    """Test carry-in seeds and forward simulation."""

    def test_split_series_with_seed_matches_full_series(self):
        """Test that a series resumed from a seed continues the unsplit result."""
        tss = [60, 80, 0, 100, 40, 0, 70, 90, 20, 0]
        full = compute_load_series(daily_series(tss))

        head = compute_load_series(daily_series(tss[:5]))
        seed = seed_from_snapshots(head)
        tail = compute_load_series(
            daily_series(tss[5:], start=START + timedelta(days=5)), seed=seed
        )

        assert tail[-1].ctl == pytest.approx(full[-1].ctl, abs=0.1)
        assert tail[-1].atl == pytest.approx(full[-1].atl, abs=0.1)

    def test_seed_from_empty_history(self):
        """Test that no prior history gives a zero seed."""
        assert seed_from_snapshots([]) == LoadSeed()

    def test_seed_carries_last_date(self):
        head = compute_load_series(daily_series([60, 80, 0]))

        seed = seed_from_snapshots(head)

        assert seed.date == START + timedelta(days=2)
        assert (seed.ctl, seed.atl) == (head[-1].ctl, head[-1].atl)

    @pytest.mark.parametrize("offset", [0, 2])
    def test_dated_seed_must_precede_series(self, offset):
        """Test that a seed not ending the day before the series is rejected."""
        seed = LoadSeed(ctl=50, atl=50, date=START + timedelta(days=offset))

        with pytest.raises(InvalidDataError):
            compute_load_series(daily_series([40, 40], start=START + timedelta(days=1)), seed=seed)

    def test_simulate_matches_load_series(self):
        """Test that simulation and the series share one recursion."""
        plan = [50, 60, 70]
        loads = simulate(40, 45, plan)
        points = compute_load_series(daily_series(plan), seed=LoadSeed(ctl=40, atl=45))

        assert [round(c, 1) for c, _ in loads] == [p.ctl for p in points]
        assert [tsb_from(c, a) for c, a in loads] == [p.tsb for p in points]

    def test_simulate_empty_plan(self):
        """Test that an empty plan projects nothing."""
        assert simulate(50, 50, []) == []
