"""
Form zone classification.

Classifies Training Stress Balance (TSB) into form zones. Zone thresholds are
data: a canonical table of half-open ``[min, max)`` ranges, optionally
overridden per zone, multiplied by one scale factor chosen from the current
fitness (CTL) bracket. Higher fitness widens every range, lower fitness
narrows it.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from ..constants import CTLAdjustment, FormZoneThresholds, PredictionConstants
from ..models import (
    FormZone,
    Level,
    TSBGoal,
    TSBRange,
    ZoneCharacteristics,
    ZoneGuidance,
    ZoneInfo,
    ZoneTransition,
)
from ..settings import Settings
from ..utils import round1
from .load import simulate, tsb_from

logger = logging.getLogger(__name__)


class HasForm(Protocol):
    """Anything carrying a TSB and CTL value."""

    tsb: float
    ctl: float


BASE_RANGES: dict[FormZone, tuple[float, float]] = {
    FormZone.OVERREACHED: FormZoneThresholds.OVERREACHED,
    FormZone.FATIGUED: FormZoneThresholds.FATIGUED,
    FormZone.PRODUCTIVE_TRAINING: FormZoneThresholds.PRODUCTIVE_TRAINING,
    FormZone.MAINTENANCE: FormZoneThresholds.MAINTENANCE,
    FormZone.OPTIMAL_RACE: FormZoneThresholds.OPTIMAL_RACE,
    FormZone.FRESH: FormZoneThresholds.FRESH,
}

GOAL_ZONES: dict[TSBGoal, FormZone] = {
    TSBGoal.RACE: FormZone.OPTIMAL_RACE,
    TSBGoal.TRAINING: FormZone.PRODUCTIVE_TRAINING,
    TSBGoal.RECOVERY: FormZone.FRESH,
    TSBGoal.MAINTENANCE: FormZone.MAINTENANCE,
}

# Static description of each zone; the TSB range is filled in per CTL.
ZONE_PROFILES: dict[FormZone, dict[str, Any]] = {
    FormZone.OVERREACHED: {
        "label": "Overreached",
        "description": "Severe overreaching - immediate recovery required",
        "color": "#991B1B",
        "characteristics": {
            "performance_potential": Level.VERY_LOW,
            "injury_risk": Level.VERY_HIGH,
            "recommended_intensity": Level.VERY_LOW,
            "training_focus": ["complete recovery", "rest", "regeneration"],
        },
        "recommendations": {
            "workout_types": ["rest", "very easy recovery", "active rest only"],
            "intensity_guidance": "No hard training",
            "volume_guidance": "Minimal volume or complete rest",
            "recovery_guidance": "Immediate recovery period required",
        },
        "warnings": [
            "CRITICAL: Very high injury/illness risk",
            "Consider complete rest for 3-7 days",
            "Monitor for signs of overtraining syndrome",
        ],
    },
    FormZone.FATIGUED: {
        "label": "Fatigued",
        "description": "Significant fatigue - approaching overreaching",
        "color": "#DC2626",
        "characteristics": {
            "performance_potential": Level.VERY_LOW,
            "injury_risk": Level.HIGH,
            "recommended_intensity": Level.VERY_LOW,
            "training_focus": ["active recovery", "easy aerobic", "reduced volume"],
        },
        "recommendations": {
            "workout_types": ["easy recovery", "active rest", "cross-training"],
            "intensity_guidance": "Very low intensity only",
            "volume_guidance": "Reduce volume significantly",
            "recovery_guidance": "Prioritize sleep, nutrition, and recovery",
        },
        "warnings": ["High injury risk", "Consider scheduled recovery week"],
    },
    FormZone.PRODUCTIVE_TRAINING: {
        "label": "Productive Training",
        "description": "Productive training stress - fitness gains occurring",
        "color": "#EF4444",
        "characteristics": {
            "performance_potential": Level.LOW,
            "injury_risk": Level.MODERATE,
            "recommended_intensity": Level.LOW,
            "training_focus": ["aerobic development", "volume accumulation", "base building"],
        },
        "recommendations": {
            "workout_types": ["easy aerobic", "long slow distance", "recovery runs"],
            "intensity_guidance": "Keep intensity low - focus on volume",
            "volume_guidance": "Can maintain or slightly increase volume",
            "recovery_guidance": "Monitor recovery markers carefully",
        },
    },
    FormZone.MAINTENANCE: {
        "label": "Maintenance",
        "description": "Neutral maintenance zone - balanced training",
        "color": "#F59E0B",
        "characteristics": {
            "performance_potential": Level.MODERATE,
            "injury_risk": Level.LOW,
            "recommended_intensity": Level.MODERATE,
            "training_focus": ["consistent training", "mixed intensities", "steady progression"],
        },
        "recommendations": {
            "workout_types": ["mixed training", "tempo runs", "steady state", "intervals"],
            "intensity_guidance": "Balanced intensity distribution",
            "volume_guidance": "Moderate volume with variety",
            "recovery_guidance": "Standard recovery protocols",
        },
    },
    FormZone.OPTIMAL_RACE: {
        "label": "Optimal Race",
        "description": "Peak race readiness - optimal form for performance",
        "color": "#10B981",
        "characteristics": {
            "performance_potential": Level.VERY_HIGH,
            "injury_risk": Level.VERY_LOW,
            "recommended_intensity": Level.HIGH,
            "training_focus": [
                "quality workouts",
                "race-specific efforts",
                "intensity maintenance",
            ],
        },
        "recommendations": {
            "workout_types": [
                "race pace",
                "threshold intervals",
                "short high-intensity",
                "technique work",
            ],
            "intensity_guidance": "Maintain intensity with reduced volume",
            "volume_guidance": "Keep volume low to moderate",
            "recovery_guidance": "Prioritize quality recovery between key sessions",
        },
    },
    FormZone.FRESH: {
        "label": "Fresh",
        "description": "Very fresh - recovered but risk of detraining if prolonged",
        "color": "#3B82F6",
        "characteristics": {
            "performance_potential": Level.HIGH,
            "injury_risk": Level.VERY_LOW,
            "recommended_intensity": Level.MODERATE,
            "training_focus": ["resume training", "gradual load increase", "technique refinement"],
        },
        "recommendations": {
            "workout_types": ["easy aerobic", "technique work", "moderate intensity"],
            "intensity_guidance": "Can handle moderate to high intensity",
            "volume_guidance": "Gradually increase volume",
            "recovery_guidance": "Well recovered - can increase training load",
        },
        "warnings": ["Extended freshness may lead to detraining"],
    },
}


class FormZoneClassifier:
    """
    Classifies TSB into CTL-adaptive form zones.

    One instance is shared by the trend analyzer, predictor and
    recommendation engine so that they all agree on zone boundaries.
    """

    def __init__(
        self,
        settings: Settings,
        overrides: Mapping[FormZone, tuple[float, float]] | None = None,
    ):
        """
        Initialize the classifier.

        Args:
            settings: Application settings (time constants, zone overrides)
            overrides: Canonical ranges replacing the defaults for specific
                zones. Takes precedence over ``settings.zone_overrides``.
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)
        self.base_ranges = dict(BASE_RANGES)
        self.base_ranges.update(settings.zone_override_ranges)
        if overrides:
            self.base_ranges.update(overrides)

    # --- Thresholds ---------------------------------------------------------

    @staticmethod
    def ctl_factor(ctl: float) -> float:
        """
        Scale factor for the fitness bracket of ``ctl``.

        Returns:
            0.8 below CTL 40, 1.0 up to and including CTL 80, 1.2 above
        """
        if ctl < CTLAdjustment.LOW_FITNESS_MAX:
            return CTLAdjustment.LOW_FITNESS_FACTOR
        if ctl <= CTLAdjustment.HIGH_FITNESS_MIN:
            return CTLAdjustment.MODERATE_FITNESS_FACTOR
        return CTLAdjustment.HIGH_FITNESS_FACTOR

    def get_zone_range(self, zone: FormZone, ctl: float = 0.0) -> TSBRange:
        """
        Scaled TSB range of a zone at the given fitness.

        Args:
            zone: Zone to look up
            ctl: Current CTL

        Returns:
            Half-open range with every finite boundary multiplied by the factor
        """
        factor = self.ctl_factor(ctl)
        low, high = self.base_ranges[zone]
        return TSBRange(min=low * factor, max=high * factor)

    def _scaled_ranges(self, ctl: float) -> dict[FormZone, TSBRange]:
        return {zone: self.get_zone_range(zone, ctl) for zone in FormZone}

    # --- Classification -----------------------------------------------------

    def classify_zone(self, tsb: float, ctl: float = 0.0) -> FormZone:
        """
        Return the zone containing ``tsb`` at the given fitness.

        Args:
            tsb: Training Stress Balance
            ctl: Current CTL, selects the scale factor

        Returns:
            The classified zone
        """
        ranges = self._scaled_ranges(ctl)
        if tsb < ranges[FormZone.OVERREACHED].max:
            return FormZone.OVERREACHED
        for zone in FormZone:
            if ranges[zone].contains(tsb):
                return zone
        # Only reachable when overrides leave a hole in the partition
        return FormZone.FRESH

    def zone_info(self, zone: FormZone, ctl: float = 0.0) -> ZoneInfo:
        """Build the ZoneInfo of a zone with its CTL-scaled range."""
        profile = ZONE_PROFILES[zone]
        return ZoneInfo(
            zone=zone,
            label=profile["label"],
            description=profile["description"],
            color=profile["color"],
            tsb_range=self.get_zone_range(zone, ctl),
            characteristics=ZoneCharacteristics(**profile["characteristics"]),
            recommendations=ZoneGuidance(**profile["recommendations"]),
            warnings=list(profile.get("warnings", [])),
        )

    def classify(self, tsb: float, ctl: float = 0.0) -> ZoneInfo:
        """
        Classify TSB into a zone and describe it.

        Args:
            tsb: Training Stress Balance
            ctl: Current CTL

        Returns:
            ZoneInfo of the classified zone
        """
        return self.zone_info(self.classify_zone(tsb, ctl), ctl)

    def classify_many(self, points: Iterable[HasForm]) -> list[ZoneInfo]:
        """Classify each point by its own TSB and CTL."""
        return [self.classify(point.tsb, point.ctl) for point in points]

    def is_optimal_for_race(self, tsb: float, ctl: float = 0.0) -> bool:
        return self.classify_zone(tsb, ctl) == FormZone.OPTIMAL_RACE

    def is_overreached(self, tsb: float) -> bool:
        """True when TSB is below the unscaled overreached boundary."""
        return tsb < self.base_ranges[FormZone.OVERREACHED][1]

    def is_excessively_fresh(self, tsb: float, ctl: float = 0.0) -> bool:
        """True when TSB is well above the scaled fresh boundary (detraining risk)."""
        fresh_min = self.base_ranges[FormZone.FRESH][0] * self.ctl_factor(ctl)
        return tsb > fresh_min + FormZoneThresholds.EXCESSIVE_FRESH_MARGIN

    # --- Targets ------------------------------------------------------------

    def get_recommended_tsb_range(
        self, goal: TSBGoal, ctl: float = 0.0
    ) -> tuple[TSBRange, FormZone]:
        """
        TSB range to aim for given a training goal.

        Args:
            goal: race, training, recovery or maintenance
            ctl: Current CTL

        Returns:
            Tuple of (scaled range, zone the range belongs to). The recovery
            range is capped at TSB 50.
        """
        zone = GOAL_ZONES[TSBGoal(goal)]
        tsb_range = self.get_zone_range(zone, ctl)
        if zone == FormZone.FRESH:
            tsb_range = TSBRange(min=tsb_range.min, max=FormZoneThresholds.RECOVERY_RANGE_CAP)
        return tsb_range, zone

    def target_range(self, zone: FormZone, ctl: float = 0.0) -> TSBRange:
        """Range used when aiming for ``zone``: the goal range if one exists, else the zone range."""
        for goal, goal_zone in GOAL_ZONES.items():
            if goal_zone == zone:
                return self.get_recommended_tsb_range(goal, ctl)[0]
        return self.get_zone_range(zone, ctl)

    def estimate_days_to_target_zone(
        self,
        current_tsb: float,
        current_ctl: float,
        current_atl: float,
        target_zone: FormZone,
        planned_daily_tss: float = 0.0,
        max_days: int = PredictionConstants.MAX_SEARCH_DAYS,
    ) -> int | None:
        """
        Days until TSB enters the target range under a constant daily load.

        Simulates the load filter forward one day at a time.

        Args:
            current_tsb: Current TSB
            current_ctl: Current CTL
            current_atl: Current ATL
            target_zone: Zone to reach
            planned_daily_tss: Constant TSS for every simulated day
            max_days: Search horizon

        Returns:
            Number of days, 0 if already in range, or None if the range is
            not reached within ``max_days``
        """
        tsb_range = self.target_range(target_zone, current_ctl)
        if tsb_range.contains(current_tsb):
            return 0

        projection = simulate(
            current_ctl,
            current_atl,
            [planned_daily_tss] * max_days,
            self.settings.ctl_days,
            self.settings.atl_days,
        )
        for day, (ctl, atl) in enumerate(projection, start=1):
            if tsb_range.contains(tsb_from(ctl, atl)):
                return day

        self.logger.debug(
            f"{target_zone.value} range {tsb_range.min}..{tsb_range.max} not reached "
            f"within {max_days} days at {round1(planned_daily_tss)} TSS/day"
        )
        return None

    # --- Transitions --------------------------------------------------------

    def get_zone_transition_info(self, from_zone: FormZone, to_zone: FormZone) -> ZoneTransition:
        """
        Describe a move between two zones.

        Direction follows the zone rank; a jump of more than two ranks is a
        major transition.
        """
        rank_diff = to_zone.rank - from_zone.rank
        if rank_diff > 0:
            direction = "improving"
        elif rank_diff < 0:
            direction = "declining"
        else:
            direction = "neutral"

        distance = abs(rank_diff)
        if distance > 2:
            significance = "major"
        elif distance >= 1:
            significance = "minor"
        else:
            significance = "none"

        return ZoneTransition(
            direction=direction,
            significance=significance,
            interpretation=self._transition_interpretation(from_zone, to_zone, direction),
        )

    @staticmethod
    def _transition_interpretation(from_zone: FormZone, to_zone: FormZone, direction: str) -> str:
        if direction == "neutral":
            return f"Remained in {from_zone.value} zone"

        if direction == "improving":
            if to_zone == FormZone.OPTIMAL_RACE and from_zone == FormZone.MAINTENANCE:
                return "Entering peak race readiness - good timing for key workouts or races"
            if to_zone == FormZone.FRESH and from_zone == FormZone.FATIGUED:
                return "Significant recovery - fatigue dissipating"
            if to_zone == FormZone.MAINTENANCE and from_zone in (
                FormZone.PRODUCTIVE_TRAINING,
                FormZone.FATIGUED,
            ):
                return "Moving toward neutral state - training load balanced"
            return f"Recovering from {from_zone.value} to {to_zone.value}"

        if to_zone == FormZone.OVERREACHED:
            return "CRITICAL: Entered overreached state - immediate recovery needed"
        if to_zone == FormZone.FATIGUED and from_zone == FormZone.MAINTENANCE:
            return "Accumulating fatigue - monitor recovery carefully"
        if to_zone == FormZone.PRODUCTIVE_TRAINING and from_zone == FormZone.OPTIMAL_RACE:
            return "Building training load - moving away from race readiness"
        return f"Increased fatigue from {from_zone.value} to {to_zone.value}"
