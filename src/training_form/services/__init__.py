"""
Service layer for high-level business operations.

This package contains services that coordinate between the data,
metrics and analysis layers to provide complete workflows.
"""

from .form_service import FormAnalysisService
from .training_stress_service import (
    TrainingStressService,
    TrainingStressServiceProtocol,
    determine_form_status,
    form_recommendation,
)

__all__ = [
    "FormAnalysisService",
    "TrainingStressService",
    "TrainingStressServiceProtocol",
    "determine_form_status",
    "form_recommendation",
]
