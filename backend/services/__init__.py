"""
Backend services for intake validation and notifications.
"""

from backend.services.intake_rules import STEP_RULES, TOTAL_STEPS, StepRule, get_step_rule, validate_step
from backend.services.submission_validator import (
    FieldError,
    ValidationResult,
    sanitize_submission,
    validate_submission,
)
from backend.services.validators import sanitize_text, validate_field

__all__ = [
    "FieldError",
    "STEP_RULES",
    "StepRule",
    "TOTAL_STEPS",
    "ValidationResult",
    "get_step_rule",
    "sanitize_submission",
    "sanitize_text",
    "validate_field",
    "validate_step",
    "validate_submission",
]
