"""
Heart rate based Training Stress Score.

Uses the heart-rate reserve between resting and threshold HR as the
intensity factor:

    IF  = max(0, (avgHR - restingHR) / (thresholdHR - restingHR))
    TSS = hours * IF^2 * 100
"""

import logging

from ..constants import HeartRateDefaults, TSSConstants
from ..models import ActivityRecord, ActivityStress, Confidence, StressDetails, TSSMethod
from ..utils import round_half_up
from .base import BaseStressCalculator

logger = logging.getLogger(__name__)


class HeartRateStressCalculator(BaseStressCalculator):
    """Calculates TSS from an activity's average heart rate."""

    method = TSSMethod.HR_TRIMP

    @property
    def threshold_hr(self) -> float:
        """Configured threshold HR, or an estimate from max HR."""
        hr = self.settings.heart_rate
        if hr.threshold_hr:
            return hr.threshold_hr
        return round_half_up(hr.max_hr * HeartRateDefaults.THRESHOLD_FROM_MAX)

    def calculate(self, record: ActivityRecord) -> ActivityStress | None:
        """
        Calculate HR-based TSS.

        Args:
            record: Activity to score

        Returns:
            The scored activity, or None when the activity has no usable
            average heart rate
        """
        if not record.average_hr or record.average_hr <= 0:
            return None

        hr = self.settings.heart_rate
        resting_hr = hr.resting_hr
        threshold_hr = self.threshold_hr
        details = StressDetails(
            average_hr=record.average_hr,
            max_hr=record.max_hr,
            threshold_hr=threshold_hr,
            resting_hr=resting_hr,
        )

        hr_range = threshold_hr - resting_hr
        if record.duration_seconds <= 0 or hr_range <= 0:
            logger.debug(
                f"Degenerate HR input for activity {record.activity_id}: "
                f"duration={record.duration_seconds}, hr_range={hr_range}"
            )
            return self._build(record, 0, Confidence.LOW, details)

        intensity_factor = max(0.0, (record.average_hr - resting_hr) / hr_range)
        tss = round_half_up(
            self._duration_hours(record)
            * intensity_factor**2
            * TSSConstants.TSS_NORMALIZATION_FACTOR
        )

        confidence = Confidence.HIGH if hr.threshold_hr else Confidence.MEDIUM
        if (
            record.average_hr < resting_hr
            or record.average_hr > hr.max_hr * HeartRateDefaults.PLAUSIBLE_MAX_FACTOR
        ):
            confidence = Confidence.LOW

        details = details.model_copy(update={"intensity_factor": intensity_factor})
        return self._build(record, tss, confidence, details)
