"""
Custom exceptions for the Training Form package.

This module defines all custom exceptions used throughout the application,
providing clear error hierarchies and specific error types for different scenarios.
"""


class TrainingFormError(Exception):
    """Base exception for all Training Form errors."""


class ConfigurationError(TrainingFormError):
    """Raised when there is an issue with configuration settings."""


class ValidationError(TrainingFormError):
    """
    Raised when caller input fails validation.

    Carries the offending parameter name and the expected format so callers
    can report the problem precisely.
    """

    def __init__(self, parameter: str, message: str, expected: str | None = None):
        self.parameter = parameter
        self.expected = expected
        detail = f"Invalid '{parameter}': {message}"
        if expected:
            detail += f" (expected: {expected})"
        super().__init__(detail)


class InvalidDataError(TrainingFormError):
    """Raised when input data is structurally invalid (e.g. a gapped daily series)."""


class DataLoadError(TrainingFormError):
    """Raised when there is an error loading data files."""
