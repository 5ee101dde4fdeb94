"""
Analysis modules.

This package contains the load and form modeling layer:
- aggregator: Daily stress aggregation and gap filling
- load: Recursive CTL/ATL/TSB filter
- zones: CTL-adaptive form zone classification
- trends: TSB trend statistics and history summaries
- predictor: Forward projection, taper plans, recovery and scenarios
- performance: Correlation of personal records with form
- recommendations: Form-based training recommendations
"""

from .aggregator import aggregate_daily, fill_missing_dates
from .load import compute_load_series, seed_from_snapshots, simulate, tsb_from
from .performance import FormPerformanceAnalyzer
from .predictor import FormPredictor, normalize_planned_tss
from .recommendations import FormRecommendationEngine
from .trends import FormTrendAnalyzer
from .zones import FormZoneClassifier

__all__ = [
    "aggregate_daily",
    "fill_missing_dates",
    "compute_load_series",
    "seed_from_snapshots",
    "simulate",
    "tsb_from",
    "FormZoneClassifier",
    "FormTrendAnalyzer",
    "FormPredictor",
    "normalize_planned_tss",
    "FormRecommendationEngine",
    "FormPerformanceAnalyzer",
]
