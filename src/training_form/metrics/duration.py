"""
Duration based TSS estimate.

Used when an activity carries no heart rate data. Each activity type has a
typical TSS-per-hour rate; unknown types use the default rate.
"""

from ..constants import TSSConstants
from ..models import ActivityRecord, ActivityStress, Confidence, TSSMethod
from ..utils import round_half_up
from .base import BaseStressCalculator


class DurationStressCalculator(BaseStressCalculator):
    """Estimates TSS from duration and activity type."""

    method = TSSMethod.DURATION_ESTIMATE

    @staticmethod
    def tss_per_hour(activity_type: str) -> int:
        """Look up the TSS/hour rate for an activity type."""
        return TSSConstants.TSS_PER_HOUR.get(
            activity_type.lower(), TSSConstants.DEFAULT_TSS_PER_HOUR
        )

    def calculate(self, record: ActivityRecord) -> ActivityStress:
        tss = 0
        if record.duration_seconds > 0:
            rate = self.tss_per_hour(record.activity_type)
            tss = round_half_up(self._duration_hours(record) * rate)
        return self._build(record, tss, Confidence.LOW)
