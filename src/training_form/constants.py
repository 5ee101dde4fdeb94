"""
Constants used throughout the Training Form package.

This module centralizes all magic numbers and commonly used values to improve
maintainability and clarity.
"""

from typing import Final


# === Time Constants ===
class TimeConstants:
    """Time-related constants."""

    SECONDS_PER_HOUR: Final[int] = 3600
    DATE_FORMAT: Final[str] = "%Y-%m-%d"


# === Training Load Windows ===
class TrainingLoadWindows:
    """Time constants for the recursive load filters (days)."""

    CTL_DAYS: Final[int] = 42  # Chronic Training Load (Fitness)
    ATL_DAYS: Final[int] = 7  # Acute Training Load (Fatigue)

    # Bounds for the analysis window of a stress-balance request
    MIN_HISTORY_DAYS: Final[int] = 7
    MAX_HISTORY_DAYS: Final[int] = 365
    DEFAULT_HISTORY_DAYS: Final[int] = 90
    TREND_LOOKBACK_DAYS: Final[int] = 7
    TREND_CHANGE_THRESHOLD: Final[float] = 2.0


# === Heart Rate Defaults ===
class HeartRateDefaults:
    """Default heart rate values used for HR-based TSS."""

    RESTING_HR: Final[int] = 50
    MAX_HR: Final[int] = 185
    THRESHOLD_FROM_MAX: Final[float] = 0.9  # Threshold HR = 90% of max HR
    PLAUSIBLE_MAX_FACTOR: Final[float] = 1.1  # avgHR above 110% of max is suspect


# === TSS Calculation Constants ===
class TSSConstants:
    """Constants for Training Stress Score calculations."""

    TSS_NORMALIZATION_FACTOR: Final[int] = 100
    DEFAULT_TSS_PER_HOUR: Final[int] = 50

    # Duration estimate rates (TSS per hour) keyed by activity type
    TSS_PER_HOUR: Final[dict[str, int]] = {
        "running": 70,
        "cycling": 60,
        "walking": 30,
        "swimming": 65,
        "strength_training": 40,
        "cardio": 50,
        "hiking": 40,
        "yoga": 20,
        "other": 50,
    }


# === Form Zone Thresholds ===
class FormZoneThresholds:
    """
    Canonical TSB ranges for the form zones, before CTL scaling.

    Every range is half-open ``[min, max)``. The bottom zone has no lower
    bound and the top zone has no upper bound, so TSB == 25 at factor 1.0
    falls in ``fresh`` and TSB == 10 falls in ``optimal_race``.
    """

    OVERREACHED: Final[tuple[float, float]] = (float("-inf"), -30.0)
    FATIGUED: Final[tuple[float, float]] = (-30.0, -20.0)
    PRODUCTIVE_TRAINING: Final[tuple[float, float]] = (-20.0, -5.0)
    MAINTENANCE: Final[tuple[float, float]] = (-5.0, 10.0)
    OPTIMAL_RACE: Final[tuple[float, float]] = (10.0, 25.0)
    FRESH: Final[tuple[float, float]] = (25.0, float("inf"))

    # Unscaled reference used by the overreaching check
    OVERREACHED_REFERENCE: Final[float] = -30.0
    EXCESSIVE_FRESH_MARGIN: Final[float] = 10.0
    RECOVERY_RANGE_CAP: Final[float] = 50.0


# === Coarse Form Status ===
class FormStatusThresholds:
    """
    TSB bands of the coarse form status reported with training stress balance.

    Bands are closed at both ends and checked from the top, so TSB == 25 is
    ``optimal`` and TSB == -10 is ``neutral``.
    """

    FRESH_ABOVE: Final[float] = 25.0
    OPTIMAL_MIN: Final[float] = 10.0
    NEUTRAL_MIN: Final[float] = -10.0
    FATIGUED_MIN: Final[float] = -30.0

    # ATL above this multiple of CTL counts as high fatigue
    HIGH_FATIGUE_RATIO: Final[float] = 1.5


# === CTL Adjustment Factors ===
class CTLAdjustment:
    """Zone scale factors keyed by fitness (CTL) bracket."""

    LOW_FITNESS_MAX: Final[float] = 40.0  # CTL below this = low fitness
    HIGH_FITNESS_MIN: Final[float] = 80.0  # CTL above this = high fitness

    LOW_FITNESS_FACTOR: Final[float] = 0.8  # Narrower zones
    MODERATE_FITNESS_FACTOR: Final[float] = 1.0
    HIGH_FITNESS_FACTOR: Final[float] = 1.2  # Wider zones


# === Trend Analysis ===
class TrendThresholds:
    """Thresholds for form trend analysis (TSB change per day)."""

    DIRECTION_SLOPE: Final[float] = 0.2
    VELOCITY_RAPID: Final[float] = 2.0
    VELOCITY_MODERATE: Final[float] = 0.5
    VELOCITY_SLOW: Final[float] = 0.2

    REVERSAL_NOISE_FLOOR: Final[float] = 2.0
    ACCELERATION_THRESHOLD: Final[float] = 0.5

    HIGH_VOLATILITY: Final[float] = 10.0
    MODERATE_VOLATILITY: Final[float] = 5.0

    PERIOD_DAYS: Final[dict[str, int]] = {
        "week": 7,
        "two_weeks": 14,
        "month": 30,
    }


# === Prediction ===
class PredictionConstants:
    """Constants for forward projection of form."""

    CONFIDENCE_DECAY: Final[float] = 0.95  # Per day
    MIN_CONFIDENCE: Final[int] = 30
    MAX_VARIABILITY_PENALTY: Final[float] = 20.0
    VARIANCE_PENALTY_DIVISOR: Final[float] = 10.0

    LARGE_FORM_CHANGE: Final[float] = 20.0
    MAINTENANCE_LOAD_FACTOR: Final[float] = 0.9  # Maintenance TSS = 90% of CTL

    # Recovery estimation
    RECOVERY_HORIZON_DAYS: Final[int] = 90
    ACTIVE_RECOVERY_CTL_FACTOR: Final[float] = 0.3
    ACTIVE_RECOVERY_MIN_TSS: Final[float] = 10.0
    EXTENDED_RECOVERY_DAYS: Final[int] = 14

    # Days-to-zone search
    MAX_SEARCH_DAYS: Final[int] = 120


# === Taper Planning ===
class TaperConstants:
    """Defaults and limits for taper plan generation."""

    DEFAULT_DURATION_DAYS: Final[int] = 14
    DEFAULT_TARGET_TSB: Final[float] = 17.0
    DEFAULT_VOLUME_REDUCTION: Final[float] = 50.0
    MIN_DURATION_DAYS: Final[int] = 1
    MAX_DURATION_DAYS: Final[int] = 42

    PEAK_LOAD_FACTOR: Final[float] = 0.9  # Peak TSS = 90% of CTL
    TARGET_CTL_RETENTION: Final[float] = 0.95

    SHORT_TAPER_WARNING_DAYS: Final[int] = 5
    LOW_CTL_WARNING: Final[float] = 40.0
    FATIGUED_TSB_WARNING: Final[float] = -20.0
    LARGE_TSB_CHANGE_WARNING: Final[float] = 30.0

    # Step strategy plateau boundaries (fraction of taper elapsed)
    STEP_BOUNDARIES: Final[tuple[float, float]] = (0.33, 0.67)


# === Form/Performance Correlation ===
class PerformanceConstants:
    """Weights and cut-offs for relating personal records to form."""

    # Zone score components, each capped
    DENSITY_WEIGHT: Final[float] = 1000.0
    DENSITY_CAP: Final[float] = 50.0
    TOTAL_PRS_FULL: Final[int] = 10
    TOTAL_PRS_CAP: Final[float] = 30.0
    DAYS_FULL: Final[int] = 100
    DAYS_CAP: Final[float] = 20.0

    EXCELLENT_SCORE: Final[int] = 70
    GOOD_SCORE: Final[int] = 50
    MODERATE_SCORE: Final[int] = 30

    # |r| lower bounds
    STRONG_CORRELATION: Final[float] = 0.7
    MODERATE_CORRELATION: Final[float] = 0.4
    WEAK_CORRELATION: Final[float] = 0.2

    CONFIDENCE_PER_PR: Final[int] = 10
    IMPROVEMENT_SCALE: Final[float] = 5.0
    MAX_IMPROVEMENT_FACTOR: Final[float] = 2.0

    # Goal -> (lower clamp, upper clamp, standard deviations around the mean);
    # races clamp to the classifier's optimal race zone instead
    GOAL_BOUNDS: Final[dict[str, tuple[float, float, float]]] = {
        "training_breakthrough": (-10.0, 10.0, 1.0),
        "consistent_performance": (-5.0, 15.0, 1.5),
    }


# === File Formats ===
class CSVConstants:
    """Constants for CSV file handling."""

    DEFAULT_SEPARATOR: Final[str] = ";"


class ActivityColumns:
    """Accepted source column names for each ActivityRecord field."""

    ALIASES: Final[dict[str, tuple[str, ...]]] = {
        "activity_id": ("activity_id", "id", "activityId"),
        "activity_name": ("activity_name", "name", "activityName"),
        "activity_type": ("activity_type", "type", "sport_type", "activityType"),
        "start_time": ("start_time", "start_date_local", "start_date", "startTimeLocal"),
        "duration_seconds": ("duration_seconds", "duration", "moving_time", "elapsed_time"),
        "average_hr": ("average_hr", "average_heartrate", "averageHR"),
        "max_hr": ("max_hr", "max_heartrate", "maxHR"),
    }
