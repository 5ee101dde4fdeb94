"""Training Form - a package for modeling training load and form from activity data."""

import logging

__version__ = "0.3.0"

from . import analysis, constants, data, exceptions, metrics, models, services
from .analysis import (
    FormPerformanceAnalyzer,
    FormPredictor,
    FormRecommendationEngine,
    FormTrendAnalyzer,
    FormZoneClassifier,
    compute_load_series,
)
from .data import ActivityDataLoader
from .metrics import DurationStressCalculator, HeartRateStressCalculator, StressScorer
from .models import (
    ActivityRecord,
    ActivityStress,
    FormAnalysis,
    FormPerformanceCorrelation,
    FormSnapshot,
    FormZone,
    LoadPoint,
    LoadSeed,
    LoadState,
    PerformanceRecord,
    Prediction,
    RecoveryEstimate,
    TaperPlan,
    TrainingRecommendation,
)
from .services import FormAnalysisService, TrainingStressService
from .settings import Settings, load_settings

logging.getLogger(__name__).addHandler(logging.NullHandler())


def get_version() -> str:
    """Get the current version of training_form."""
    return __version__


def get_package_info() -> dict[str, str]:
    """Get package information including name and version."""
    return {
        "name": "training-form",
        "version": __version__,
        "description": "Training load and form modeling from activity data",
    }


__all__ = [
    # Version & Info
    "get_version",
    "get_package_info",
    # Settings
    "Settings",
    "load_settings",
    # Models
    "ActivityRecord",
    "ActivityStress",
    "FormAnalysis",
    "FormPerformanceCorrelation",
    "FormSnapshot",
    "FormZone",
    "LoadPoint",
    "LoadSeed",
    "LoadState",
    "PerformanceRecord",
    "Prediction",
    "RecoveryEstimate",
    "TaperPlan",
    "TrainingRecommendation",
    # Stress Scoring
    "StressScorer",
    "HeartRateStressCalculator",
    "DurationStressCalculator",
    # Data Layer
    "ActivityDataLoader",
    # Analysis Layer
    "compute_load_series",
    "FormZoneClassifier",
    "FormTrendAnalyzer",
    "FormPredictor",
    "FormRecommendationEngine",
    "FormPerformanceAnalyzer",
    # Services
    "FormAnalysisService",
    "TrainingStressService",
    # Modules
    "analysis",
    "constants",
    "data",
    "exceptions",
    "metrics",
    "models",
    "services",
]
