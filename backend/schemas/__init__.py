"""
FRAQTIV Intake Pydantic Schemas
Request/Response models for API endpoints.
"""
from backend.schemas.intake import IntakeResponse, IntakeSubmission, SanitizedIntake

__all__ = [
    "IntakeResponse",
    "IntakeSubmission",
    "SanitizedIntake",
]
