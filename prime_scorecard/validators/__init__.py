"""
Validators for scorecard output.

This module provides validation utilities for:
- Serialized scorecards read back from storage
"""

from .scorecard_validator import REQUIRED_FIELDS, ValidationError, ValidationResult, validate_scorecard

__all__ = [
    "REQUIRED_FIELDS",
    "ValidationError",
    "ValidationResult",
    "validate_scorecard",
]
