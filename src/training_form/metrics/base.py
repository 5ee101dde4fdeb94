"""
Base classes and protocols for stress calculators.

Defines the interface that all Training Stress Score calculators should follow.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from ..constants import TimeConstants
from ..models import ActivityRecord, ActivityStress, Confidence, StressDetails, TSSMethod
from ..settings import Settings


class StressCalculatorProtocol(Protocol):
    """Protocol defining the interface for stress calculators."""

    def calculate(self, record: ActivityRecord) -> ActivityStress | None:
        """
        Calculate the stress score of one activity.

        Args:
            record: Activity to score

        Returns:
            The scored activity, or None if this calculator cannot score it
        """
        ...


class BaseStressCalculator(ABC):
    """
    Abstract base class for stress calculators.

    Provides common functionality and enforces interface consistency.
    """

    method: TSSMethod

    def __init__(self, settings: Settings):
        """
        Initialize calculator with settings.

        Args:
            settings: Application settings containing athlete parameters
        """
        self.settings = settings

    @abstractmethod
    def calculate(self, record: ActivityRecord) -> ActivityStress | None:
        """
        Calculate the stress score of one activity.

        Args:
            record: Activity to score

        Returns:
            The scored activity, or None if this calculator cannot score it
        """
        raise NotImplementedError("Subclasses must implement calculate()")

    def _duration_hours(self, record: ActivityRecord) -> float:
        """Activity duration in hours."""
        return record.duration_seconds / TimeConstants.SECONDS_PER_HOUR

    def _build(
        self,
        record: ActivityRecord,
        tss: float,
        confidence: Confidence,
        details: StressDetails | None = None,
    ) -> ActivityStress:
        """
        Assemble the result model for a scored activity.

        Args:
            record: Source activity
            tss: Computed Training Stress Score
            confidence: Data-quality tag
            details: Intermediate values behind the score

        Returns:
            Frozen ActivityStress
        """
        return ActivityStress(
            activity_id=record.activity_id,
            activity_name=record.activity_name,
            activity_type=record.activity_type,
            start_time=record.start_time,
            duration_seconds=record.duration_seconds,
            tss=max(0, tss),
            method=self.method,
            confidence=confidence,
            details=details or StressDetails(),
        )
