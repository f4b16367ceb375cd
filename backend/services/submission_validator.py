"""
Intake Submission Validator
Sanitizes a whole submission and validates it against the step rules.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from backend.schemas.intake import SanitizedIntake
from backend.services.intake_rules import STEP_RULES, industry_is_other, other_pain_point_selected, required_fields
from backend.services.validators import sanitize_text, validate_field


TEXT_FIELDS: tuple[str, ...] = (
    "full_name",
    "business_email",
    "phone_number",
    "company_name",
    "industry",
    "revenue_range",
    "exit_timeline",
)
OPTIONAL_TEXT_FIELDS: tuple[str, ...] = ("custom_industry", "custom_pain_point", "additional_notes")
ALL_FIELDS: tuple[str, ...] = TEXT_FIELDS + OPTIONAL_TEXT_FIELDS + ("pain_points",)

_CAMEL_TO_SNAKE = {to_camel(name): name for name in ALL_FIELDS}

Payload = Union[BaseModel, Mapping[str, Any]]


@dataclass(frozen=True)
class FieldError:
    """A single validation failure."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a whole submission."""

    errors: tuple[FieldError, ...] = ()
    submission: Optional[SanitizedIntake] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


def payload_to_dict(payload: Payload) -> dict[str, Any]:
    """Normalize a model or a snake_case/camelCase mapping to snake_case keys."""
    if isinstance(payload, BaseModel):
        raw = payload.model_dump()
    else:
        raw = {_CAMEL_TO_SNAKE.get(key, key): value for key, value in payload.items()}
    return {name: raw.get(name) for name in ALL_FIELDS}


def sanitize_submission(payload: Payload) -> dict[str, Any]:
    """
    Produce the sanitized form of a submission without validating it.

    Every string is passed through :func:`sanitize_text`, the email is
    lowercased, pain points are de-duplicated, blank optionals become
    ``None`` and custom fields are dropped when their trigger is absent.
    """
    raw = payload_to_dict(payload)
    data: dict[str, Any] = {name: sanitize_text(raw[name]) for name in TEXT_FIELDS}
    data["business_email"] = data["business_email"].lower()

    for name in OPTIONAL_TEXT_FIELDS:
        data[name] = sanitize_text(raw[name]) or None

    pain_points: list[str] = []
    for item in raw["pain_points"] or ():
        cleaned = sanitize_text(item) if isinstance(item, str) else ""
        if cleaned and cleaned not in pain_points:
            pain_points.append(cleaned)
    data["pain_points"] = tuple(pain_points)

    if not industry_is_other(data):
        data["custom_industry"] = None
    if not other_pain_point_selected(data):
        data["custom_pain_point"] = None

    return data


def validate_submission(payload: Payload, strict_email: bool = False) -> ValidationResult:
    """
    Sanitize and validate a complete submission.

    All step rules are evaluated in wizard order and every failure is
    collected. A sanitized copy is returned only when there are no failures.

    Args:
        payload: Submission as a model or mapping.
        strict_email: Apply the wizard's recognized-suffix email policy.

    Returns:
        ValidationResult with either errors or the sanitized submission.
    """
    data = sanitize_submission(payload)

    errors: list[FieldError] = []
    for rule in STEP_RULES:
        for name in required_fields(rule, data):
            message = validate_field(name, data, strict_email=strict_email)
            if message:
                errors.append(FieldError(field=name, message=message))

    if errors:
        return ValidationResult(errors=tuple(errors))
    return ValidationResult(submission=SanitizedIntake(**data))
