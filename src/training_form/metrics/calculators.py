"""
High-level stress scoring orchestrator.

This module provides the main scorer class that picks the appropriate
calculator for each activity: heart rate when an average HR is available,
otherwise a duration estimate by activity type.
"""

import logging
from collections.abc import Iterable

from ..models import ActivityRecord, ActivityStress, TSSMethod
from ..settings import Settings
from .duration import DurationStressCalculator
from .heartrate import HeartRateStressCalculator

logger = logging.getLogger(__name__)


class StressScorer:
    """
    Orchestrates Training Stress Score calculation.

    Degenerate inputs never raise; they yield a zero score with low
    confidence so that partial data still flows downstream.
    """

    def __init__(self, settings: Settings):
        """
        Initialize scorer with its calculators.

        Args:
            settings: Application settings containing athlete HR parameters
        """
        self.settings = settings
        self.hr_calculator = HeartRateStressCalculator(settings)
        self.duration_calculator = DurationStressCalculator(settings)

    def score(self, record: ActivityRecord) -> ActivityStress:
        """
        Score a single activity.

        Args:
            record: Activity to score

        Returns:
            ActivityStress with method and confidence set
        """
        stress = self.hr_calculator.calculate(record)
        if stress is None:
            stress = self.duration_calculator.calculate(record)
        return stress

    def score_many(self, records: Iterable[ActivityRecord]) -> list[ActivityStress]:
        """
        Score a batch of activities.

        Args:
            records: Activities to score

        Returns:
            One ActivityStress per record, in input order
        """
        stresses = [self.score(record) for record in records]
        with_hr, estimated = self.count_by_method(stresses)
        logger.debug(
            f"Scored {len(stresses)} activities "
            f"({with_hr} from heart rate, {estimated} estimated)"
        )
        return stresses

    @staticmethod
    def count_by_method(stresses: Iterable[ActivityStress]) -> tuple[int, int]:
        """
        Count HR-based and duration-estimated scores.

        Returns:
            Tuple of (activities with HR, activities estimated)
        """
        with_hr = estimated = 0
        for stress in stresses:
            if stress.method == TSSMethod.HR_TRIMP:
                with_hr += 1
            else:
                estimated += 1
        return with_hr, estimated
