"""
Data models for the Training Form package.

This module defines all the core data structures used throughout the application,
ensuring type safety and data validation using Pydantic models. Dates serialize
to ``YYYY-MM-DD`` strings via ``model_dump(mode="json")``.
"""

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TSSMethod(str, Enum):
    """How a Training Stress Score was obtained."""

    HR_TRIMP = "hr_trimp"
    DURATION_ESTIMATE = "duration_estimate"


class Confidence(str, Enum):
    """Data-quality tag attached to a stress score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FormZone(str, Enum):
    """Form zones, declared in order of increasing TSB."""

    OVERREACHED = "overreached"
    FATIGUED = "fatigued"
    PRODUCTIVE_TRAINING = "productive_training"
    MAINTENANCE = "maintenance"
    OPTIMAL_RACE = "optimal_race"
    FRESH = "fresh"

    @property
    def rank(self) -> int:
        """Ordinal position (1 = overreached, 6 = fresh)."""
        return list(FormZone).index(self) + 1


class Level(str, Enum):
    """Five-step qualitative scale used for zone characteristics."""

    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class TrendDirection(str, Enum):
    """Direction of the TSB signal."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class TrendVelocity(str, Enum):
    """Speed class of a TSB trend."""

    RAPID = "rapid"
    MODERATE = "moderate"
    SLOW = "slow"
    STABLE = "stable"


class TrendPeriod(str, Enum):
    """Trailing windows used by trend analysis."""

    WEEK = "week"
    TWO_WEEKS = "two_weeks"
    MONTH = "month"


class TaperStrategy(str, Enum):
    """Shape of the load reduction during a taper."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    STEP = "step"


class FormStatus(str, Enum):
    """Coarse form status reported with a stress-balance result."""

    FRESH = "fresh"
    OPTIMAL = "optimal"
    NEUTRAL = "neutral"
    FATIGUED = "fatigued"
    OVERREACHED = "overreached"


class TSBGoal(str, Enum):
    """Goals for which a recommended TSB range can be requested."""

    RACE = "race"
    TRAINING = "training"
    RECOVERY = "recovery"
    MAINTENANCE = "maintenance"


# --- Activity stress -------------------------------------------------------


class ActivityRecord(BaseModel):
    """One activity as delivered by the activity fetcher."""

    activity_id: int = Field(0, description="Unique activity ID")
    activity_name: str = Field("Unnamed Activity", description="Activity name")
    activity_type: str = Field("unknown", description="Activity type key")
    start_time: datetime = Field(..., description="Local activity start time")
    duration_seconds: float = Field(0.0, description="Duration in seconds")
    average_hr: float | None = Field(None, description="Average heart rate in bpm")
    max_hr: float | None = Field(None, description="Maximum heart rate in bpm")


class StressDetails(BaseModel):
    """Inputs and intermediate values behind a stress score."""

    average_hr: float | None = None
    max_hr: float | None = None
    threshold_hr: float | None = None
    resting_hr: float | None = None
    intensity_factor: float | None = None


class ActivityStress(BaseModel):
    """Training Stress Score computed for a single activity."""

    model_config = ConfigDict(frozen=True)

    activity_id: int = Field(..., description="Unique activity ID")
    activity_name: str = Field(..., description="Activity name")
    activity_type: str = Field(..., description="Activity type key")
    start_time: datetime = Field(..., description="Local activity start time")
    duration_seconds: float = Field(..., description="Duration in seconds")
    tss: float = Field(..., ge=0, description="Training Stress Score")
    method: TSSMethod = Field(..., description="Calculation method")
    confidence: Confidence = Field(..., description="Data-quality tag")
    details: StressDetails = Field(default_factory=StressDetails)

    @property
    def day(self) -> date:
        """Calendar day the activity counts towards."""
        return self.start_time.date()


class DailyActivityEntry(BaseModel):
    """Summary of one activity inside a daily stress entry."""

    activity_id: int
    activity_name: str
    activity_type: str
    tss: float
    confidence: Confidence


class DailyStress(BaseModel):
    """Sum of all activity stress on one calendar day."""

    date: date
    total_tss: float = Field(0.0, ge=0, description="Sum of same-day TSS")
    activity_count: int = Field(0, ge=0)
    activities: list[DailyActivityEntry] = Field(default_factory=list)


# --- Load and form ---------------------------------------------------------


class LoadPoint(BaseModel):
    """CTL/ATL/TSB for one day of the filtered series."""

    date: date
    tss: float = Field(..., description="Daily TSS fed into the filter")
    ctl: float = Field(..., ge=0, description="Chronic Training Load (fitness)")
    atl: float = Field(..., ge=0, description="Acute Training Load (fatigue)")
    tsb: float = Field(..., description="Training Stress Balance (form)")


class LoadSeed(BaseModel):
    """
    Carry-in CTL/ATL used to resume the recursion from a prior computation.

    When ``date`` is set it is the last day of the prior series; the resumed
    series must start on the following day.
    """

    ctl: float = Field(0.0, ge=0)
    atl: float = Field(0.0, ge=0)
    date: dt.date | None = Field(None, description="Last day covered by the prior series")


class LoadState(BaseModel):
    """Current fitness/fatigue state used as the starting point of a projection."""

    ctl: float = Field(0.0, ge=0, description="Current CTL")
    atl: float = Field(0.0, ge=0, description="Current ATL")
    tsb: float | None = Field(None, description="Current TSB (defaults to CTL - ATL)")

    @model_validator(mode="after")
    def fill_tsb(self) -> "LoadState":
        """Derive TSB from CTL and ATL when it was not supplied."""
        if self.tsb is None:
            self.tsb = round(self.ctl - self.atl, 1)
        return self


class TSBRange(BaseModel):
    """Half-open TSB interval ``[min, max)``."""

    min: float
    max: float

    def contains(self, tsb: float) -> bool:
        """Return True when ``tsb`` lies in the interval."""
        return self.min <= tsb < self.max

    @property
    def midpoint(self) -> float:
        """Centre of the range, falling back to a finite bound when open."""
        if self.min == float("-inf"):
            return self.max
        if self.max == float("inf"):
            return self.min
        return (self.min + self.max) / 2


class ZoneCharacteristics(BaseModel):
    """Qualitative characteristics of a form zone."""

    performance_potential: Level
    injury_risk: Level
    recommended_intensity: Level
    training_focus: list[str]


class ZoneGuidance(BaseModel):
    """Workout guidance attached to a form zone."""

    workout_types: list[str]
    intensity_guidance: str
    volume_guidance: str
    recovery_guidance: str


class ZoneInfo(BaseModel):
    """Full description of a classified zone with its CTL-scaled range."""

    zone: FormZone
    label: str
    description: str
    color: str
    tsb_range: TSBRange
    characteristics: ZoneCharacteristics
    recommendations: ZoneGuidance
    warnings: list[str] = Field(default_factory=list)


class SnapshotChanges(BaseModel):
    """Day-over-day deltas of a form snapshot."""

    tss_change: float = 0.0
    ctl_change: float = 0.0
    atl_change: float = 0.0
    tsb_change: float = 0.0
    zone_changed: bool = False
    previous_zone: FormZone | None = None


class FormSnapshot(BaseModel):
    """A load point enriched with its zone classification."""

    date: date
    tss: float
    ctl: float
    atl: float
    tsb: float
    zone: FormZone
    zone_info: ZoneInfo
    activity_count: int = 0
    changes: SnapshotChanges = Field(default_factory=SnapshotChanges)


class ZoneTransition(BaseModel):
    """Interpretation of a move between two zones."""

    direction: Literal["improving", "declining", "neutral"]
    significance: Literal["major", "minor", "none"]
    interpretation: str


# --- Trends ----------------------------------------------------------------


class ZoneChange(BaseModel):
    """A day on which the classified zone differs from the previous day."""

    date: date
    from_zone: FormZone
    to_zone: FormZone
    tsb_value: float


class Reversal(BaseModel):
    """A local extremum of the TSB signal."""

    date: date
    tsb_value: float
    previous_direction: Literal["increasing", "decreasing"]
    new_direction: Literal["increasing", "decreasing"]


class Trend(BaseModel):
    """Statistics of the TSB signal over a trailing window."""

    period: TrendPeriod
    duration_days: int
    start_date: date | None = None
    end_date: date | None = None
    direction: TrendDirection = TrendDirection.STABLE
    slope: float = Field(0.0, description="TSB change per day (OLS)")
    velocity: TrendVelocity = TrendVelocity.STABLE
    r_squared: float = Field(0.0, description="Goodness of fit of the slope")
    average_tsb: float = 0.0
    min_tsb: float = 0.0
    max_tsb: float = 0.0
    volatility: float = Field(0.0, description="Standard deviation of TSB")
    zone_changes: list[ZoneChange] = Field(default_factory=list)
    reversals: list[Reversal] = Field(default_factory=list)


class MultiPeriodTrends(BaseModel):
    """Trends over the standard 7/14/30 day windows."""

    week: Trend
    two_weeks: Trend
    month: Trend


class TrendAcceleration(BaseModel):
    """Comparison of the slope in the first and second half of a window."""

    is_accelerating: bool
    acceleration_rate: float
    interpretation: str


class ZoneDistributionEntry(BaseModel):
    """Time spent in one zone."""

    days: int = 0
    percentage: float = 0.0


class PeakFitness(BaseModel):
    date: date
    ctl: float


class MaxFatigue(BaseModel):
    date: date
    atl: float
    tsb: float


class MaxFreshness(BaseModel):
    date: date
    tsb: float


class FormHistorySummary(BaseModel):
    """Summary statistics of a snapshot history."""

    total_days: int
    start_date: date | None = None
    end_date: date | None = None
    zone_distribution: dict[FormZone, ZoneDistributionEntry]
    average_tsb: float = 0.0
    average_ctl: float = 0.0
    average_atl: float = 0.0
    peak_fitness: PeakFitness | None = None
    max_fatigue: MaxFatigue | None = None
    max_freshness: MaxFreshness | None = None


class FormHistory(BaseModel):
    """Snapshot history with its summary."""

    snapshots: list[FormSnapshot]
    summary: FormHistorySummary


# --- Prediction ------------------------------------------------------------


class PredictionAssumptions(BaseModel):
    planned_daily_tss: list[float]
    current_ctl: float
    current_atl: float
    current_tsb: float


class PredictionDetails(BaseModel):
    projected_ctl: float
    projected_atl: float
    expected_fatigue_decay: float
    expected_fitness_decay: float


class Prediction(BaseModel):
    """Projected form on a future date under a planned load."""

    target_date: date
    days_ahead: int
    predicted_tsb: float
    predicted_zone: FormZone
    confidence: int = Field(..., ge=0, le=100)
    assumptions: PredictionAssumptions
    details: PredictionDetails
    recommendations: list[str] = Field(default_factory=list)


class ScenarioDay(BaseModel):
    """One day of a what-if simulation."""

    day: int
    date: date
    tss: float
    ctl: float
    atl: float
    tsb: float
    zone: FormZone


class RecoveryEstimate(BaseModel):
    """Days of rest or light load needed to reach a target zone."""

    target_zone: FormZone
    estimated_days: int
    reached: bool = Field(..., description="False if the horizon ran out first")
    rest: bool
    recovery_tss: float
    daily_tsb_change: float
    target_tsb_range: TSBRange
    recommendations: list[str] = Field(default_factory=list)


class TaperCurrentState(BaseModel):
    date: date
    ctl: float
    atl: float
    tsb: float
    zone: FormZone


class TaperTargetState(BaseModel):
    target_tsb: float
    target_zone: FormZone
    target_ctl: float


class TaperDay(BaseModel):
    """One day of a taper schedule."""

    date: date
    day_of_taper: int
    planned_tss: float
    reduction_from_peak: float = Field(..., description="Percent below peak load")
    predicted_tsb: float
    predicted_zone: FormZone
    notes: str


class TaperStrategyInfo(BaseModel):
    type: TaperStrategy
    volume_reduction: float
    intensity_maintenance: bool
    critical_workouts: list[str] = Field(default_factory=list)


class TaperPlan(BaseModel):
    """Day-by-day pre-race load reduction with its predicted effect on form."""

    race_date: date
    taper_start_date: date
    taper_duration: int
    current_state: TaperCurrentState
    target_state: TaperTargetState
    schedule: list[TaperDay]
    strategy: TaperStrategyInfo
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# --- Recommendations -------------------------------------------------------


class UpcomingRace(BaseModel):
    date: date
    days_until: int = Field(..., ge=0)
    priority: Literal["A", "B", "C"] = "A"


class RecommendationContext(BaseModel):
    """Inputs to the form-based training recommendation engine."""

    current_zone: FormZone
    current_tsb: float
    current_ctl: float
    current_atl: float
    tsb_trend: TrendDirection = TrendDirection.STABLE
    recent_zone_changes: int = 0
    upcoming_race: UpcomingRace | None = None


class TSSRange(BaseModel):
    min: float
    max: float


class Guidance(BaseModel):
    primary: str
    secondary: list[str] = Field(default_factory=list)
    cautions: list[str] = Field(default_factory=list)


class TrainingRecommendation(BaseModel):
    """Form-aware training recommendation for one day."""

    date: date
    current_zone: FormZone
    recommended_tss: TSSRange
    recommended_intensity: Level
    recommended_volume: Level
    workout_types: list[str] = Field(default_factory=list)
    avoid_workouts: list[str] = Field(default_factory=list)
    guidance: Guidance


# --- Service results -------------------------------------------------------


class AnalysisPeriod(BaseModel):
    start_date: date
    end_date: date
    days: int


class TrainingStressTrends(BaseModel):
    """Change of the load metrics over the trend lookback."""

    ctl_change: float
    atl_change: float
    tsb_change: float
    tsb_trend: TrendDirection


class TrainingStressBalance(BaseModel):
    """Current load point with its coarse form status."""

    date: date
    ctl: float
    atl: float
    tsb: float
    form_status: FormStatus
    form_description: str
    recommendation: str
    trends: TrainingStressTrends | None = None


class StressSummary(BaseModel):
    """Counts that let callers judge the reliability of a result."""

    total_activities: int = 0
    total_tss: float = 0.0
    average_daily_tss: float = 0.0
    activities_with_hr: int = 0
    activities_estimated: int = 0


class TrainingStressBalanceResult(BaseModel):
    """CTL/ATL/TSB for a target date with optional time series."""

    current_date: date
    period: AnalysisPeriod
    current: TrainingStressBalance
    time_series: list[LoadPoint] | None = None
    summary: StressSummary = Field(default_factory=StressSummary)


class FormWarning(BaseModel):
    severity: Literal["info", "warning", "critical"]
    type: str
    message: str


class FormRecommendations(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)


class FormPredictions(BaseModel):
    next_week: Prediction
    two_weeks: Prediction


# ============================================================================
# Form/Performance Correlation
# ============================================================================


class PerformanceGoal(str, Enum):
    """What an optimal TSB range is being sought for."""

    RACE = "race"
    TRAINING_BREAKTHROUGH = "training_breakthrough"
    CONSISTENT_PERFORMANCE = "consistent_performance"


class PerformanceRecord(BaseModel):
    """A personal record set on a given day, supplied by the caller."""

    date: date
    category: str = Field(..., description="Effort category, e.g. '5k' or '20min_power'")
    improvement: float | None = Field(None, description="Improvement over the previous best in percent")


class ZonePerformanceRecord(BaseModel):
    """A personal record matched to the form on its day."""

    category: str
    date: date
    tsb: float
    improvement: float = 0.0


class ZonePerformance(BaseModel):
    """Personal records achieved while in one form zone."""

    total_prs: int = 0
    pr_density: float = Field(0.0, description="Personal records per day in the zone")
    average_tsb: float = 0.0
    days_in_zone: int = 0
    prs: list[ZonePerformanceRecord] = Field(default_factory=list)


class ZoneScore(BaseModel):
    zone: FormZone
    score: int = Field(..., ge=0, le=100)
    reasoning: str


class TSBCorrelation(BaseModel):
    """Pearson correlation between TSB and improvement on record days."""

    coefficient: float = Field(0.0, ge=-1, le=1)
    significance: Literal["strong", "moderate", "weak", "none"] = "none"
    p_value: float | None = None
    optimal_tsb_range: TSBRange


class FormPerformanceCorrelation(BaseModel):
    """How personal records relate to form over a period."""

    period: AnalysisPeriod
    performance_by_zone: dict[FormZone, ZonePerformance]
    optimal_zones: list[ZoneScore] = Field(default_factory=list)
    tsb_correlation: TSBCorrelation
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class OptimalTSB(BaseModel):
    """TSB range in which a goal's personal records were set."""

    goal: PerformanceGoal
    optimal_tsb_range: TSBRange
    optimal_zone: FormZone
    confidence: int = Field(..., ge=0, le=100)
    pr_count: int = 0
    average_improvement: float = 0.0
    success_rate: float = Field(0.0, description="Percent of records inside the range")


class ZoneProbability(BaseModel):
    pr_probability: float = Field(0.0, description="Chance of a record on a day in the zone, percent")
    prs_per_week: float = 0.0
    quality_score: int = 0


class FormAnalysis(BaseModel):
    """Complete current-form analysis."""

    analysis_date: date
    current: FormSnapshot
    trends: MultiPeriodTrends
    acceleration: TrendAcceleration
    predictions: FormPredictions | None = None
    recommendations: FormRecommendations = Field(default_factory=FormRecommendations)
    warnings: list[FormWarning] = Field(default_factory=list)
    time_series: list[FormSnapshot] | None = None
    performance_correlation: FormPerformanceCorrelation | None = None


class ZoneOverride(BaseModel):
    """Caller-supplied replacement for one zone's canonical TSB range."""

    min: float = float("-inf")
    max: float = float("inf")

    @field_validator("max")
    @classmethod
    def check_order(cls, v: float, info) -> float:
        """Validate that the range is not inverted."""
        lower = info.data.get("min", float("-inf"))
        if v <= lower:
            raise ValueError("Zone override max must be greater than min")
        return v


# --- Configuration models --------------------------------------------------


class HeartRateConfig(BaseModel):
    """Athlete heart rate parameters used by HR-based TSS."""

    resting_hr: float = Field(50, description="Resting heart rate in bpm")
    max_hr: float = Field(185, description="Maximum heart rate in bpm")
    threshold_hr: float | None = Field(
        None, description="Lactate threshold HR (estimated from max HR if unset)"
    )

    @field_validator("resting_hr", "max_hr", "threshold_hr")
    @classmethod
    def check_heart_rate(cls, v: float | None, info) -> float | None:
        """Validate that heart rates are physiologically plausible."""
        if v is not None and not 20 <= v <= 250:
            raise ValueError(f"{info.field_name} must be between 20 and 250 bpm")
        return v


class TaperConfig(BaseModel):
    """Default taper parameters."""

    duration_days: int = Field(14, description="Taper length in days")
    target_tsb: float = Field(17.0, description="TSB to arrive at on race day")
    strategy: TaperStrategy = TaperStrategy.EXPONENTIAL
    volume_reduction: float = Field(50.0, description="Volume reduction in percent")
    maintain_intensity: bool = True

    @field_validator("duration_days")
    @classmethod
    def check_duration(cls, v: int) -> int:
        """Validate the taper length."""
        if not 1 <= v <= 42:
            raise ValueError("Taper duration must be between 1 and 42 days")
        return v

    @field_validator("volume_reduction")
    @classmethod
    def check_volume_reduction(cls, v: float) -> float:
        """Validate that the reduction is a percentage."""
        if not 0 <= v <= 100:
            raise ValueError("Volume reduction must be between 0 and 100 percent")
        return v
