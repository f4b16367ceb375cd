"""
Intake Step Rules
Declarative description of the intake wizard steps.

Each step names the fields it requires and, optionally, a conditional rule
that adds fields when a predicate over the current values holds. The wizard
uses the table to guard step advances; the server walks the same table to
validate a complete submission.
"""
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from backend.services.validators import (
    INDUSTRY_OPTIONS,
    OTHER_OPTION,
    PAIN_POINT_OPTIONS,
    REVENUE_OPTIONS,
    TIMELINE_OPTIONS,
    validate_field,
)


@dataclass(frozen=True)
class ConditionalRule:
    """Extra required fields that apply only when ``predicate(values)`` is true."""

    predicate: Callable[[Mapping[str, Any]], bool]
    fields: tuple[str, ...]


@dataclass(frozen=True)
class StepRule:
    """One wizard step."""

    number: int
    title: str
    fields: tuple[str, ...] = ()
    conditional: Optional[ConditionalRule] = None
    focus_field: Optional[str] = None
    # Choice steps focus their first option instead of a text input
    options: tuple[str, ...] = ()
    autofocus: bool = True

    @property
    def focus_option(self) -> Optional[str]:
        return self.options[0] if self.options else None


def industry_is_other(values: Mapping[str, Any]) -> bool:
    return (values.get("industry") or "").strip() == OTHER_OPTION


def other_pain_point_selected(values: Mapping[str, Any]) -> bool:
    return OTHER_OPTION in [p.strip() for p in (values.get("pain_points") or ()) if isinstance(p, str)]


STEP_RULES: tuple[StepRule, ...] = (
    StepRule(1, "What's your full name?", ("full_name",), focus_field="full_name"),
    StepRule(2, "What's your business email?", ("business_email",), focus_field="business_email"),
    StepRule(
        3,
        "What's the best phone number for us to reach you?",
        ("phone_number",),
        focus_field="phone_number",
    ),
    StepRule(4, "What's your company name?", ("company_name",), focus_field="company_name"),
    StepRule(
        5,
        "What industry are you in?",
        ("industry",),
        conditional=ConditionalRule(industry_is_other, ("custom_industry",)),
        focus_field="industry",
        options=INDUSTRY_OPTIONS,
    ),
    StepRule(
        6,
        "What's your annual revenue range?",
        ("revenue_range",),
        focus_field="revenue_range",
        options=REVENUE_OPTIONS,
    ),
    StepRule(
        7,
        "What's your target exit timeline?",
        ("exit_timeline",),
        focus_field="exit_timeline",
        options=TIMELINE_OPTIONS,
    ),
    StepRule(
        8,
        "What are your primary pain points? (Select all that apply)",
        ("pain_points",),
        conditional=ConditionalRule(other_pain_point_selected, ("custom_pain_point",)),
        focus_field="pain_points",
        options=PAIN_POINT_OPTIONS,
    ),
    # Focusing the notes field on entry let a habitual Enter submit the form
    StepRule(
        9,
        "Anything else you'd like our team to know?",
        focus_field="additional_notes",
        autofocus=False,
    ),
)

TOTAL_STEPS = len(STEP_RULES)


def get_step_rule(step: int) -> StepRule:
    if not 1 <= step <= TOTAL_STEPS:
        raise ValueError(f"Step must be between 1 and {TOTAL_STEPS}, got {step}")
    return STEP_RULES[step - 1]


def required_fields(rule: StepRule, values: Mapping[str, Any]) -> tuple[str, ...]:
    """Fields required by ``rule`` given the current values."""
    fields = rule.fields
    if rule.conditional is not None and rule.conditional.predicate(values):
        fields = fields + rule.conditional.fields
    return fields


def validate_step(
    step: int,
    values: Mapping[str, Any],
    strict_email: bool = False,
) -> dict[str, str]:
    """
    Validate every field the step requires.

    Returns:
        Mapping of field name to the first failure for that field, in the
        order the step declares them. Empty when the step is valid.
    """
    errors: dict[str, str] = {}
    for name in required_fields(get_step_rule(step), values):
        message = validate_field(name, values, strict_email=strict_email)
        if message:
            errors[name] = message
    return errors
