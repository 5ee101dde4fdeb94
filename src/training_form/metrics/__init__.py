"""
Stress scoring modules.

This package contains all Training Stress Score logic, organized by source:
- heartrate: HR-based TSS from the heart-rate reserve
- duration: Duration estimate by activity type
- calculators: High-level scorer that picks the calculator per activity
"""

from .base import BaseStressCalculator, StressCalculatorProtocol
from .calculators import StressScorer
from .duration import DurationStressCalculator
from .heartrate import HeartRateStressCalculator

__all__ = [
    "StressScorer",
    "BaseStressCalculator",
    "StressCalculatorProtocol",
    "HeartRateStressCalculator",
    "DurationStressCalculator",
]
