"""
Intake wizard state machine.

The wizard is modelled as an explicit state value and a pure reducer:
``reduce(state, action)`` returns the next state together with the side
effects the UI should perform (focus a field, scroll a step into view, post
the submission). Nothing here touches a UI or the network, so every
transition can be tested directly.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from backend.schemas.intake import SanitizedIntake
from backend.services.intake_rules import STEP_RULES, TOTAL_STEPS, get_step_rule, validate_step
from backend.services.submission_validator import validate_submission
from backend.services.validators import OTHER_OPTION, PAIN_POINT_OPTIONS
from wizard.formatting import format_phone_number


SUBMIT_ERROR_MESSAGE = "There was an error submitting your information. Please try again."
ENTER_KEY = "Enter"

INITIAL_VALUES: dict[str, Any] = {
    "full_name": "",
    "business_email": "",
    "phone_number": "",
    "company_name": "",
    "industry": "",
    "custom_industry": "",
    "revenue_range": "",
    "exit_timeline": "",
    "pain_points": (),
    "custom_pain_point": "",
    "additional_notes": "",
}


def _field_steps() -> dict[str, int]:
    """Step on which each field is entered, including conditional fields."""
    steps = {"additional_notes": TOTAL_STEPS}
    for rule in STEP_RULES:
        for name in rule.fields + (rule.conditional.fields if rule.conditional else ()):
            steps[name] = rule.number
    return steps


FIELD_STEPS: dict[str, int] = _field_steps()


class WizardStatus(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class WizardState:
    """Snapshot of the wizard. Treat ``values`` and ``errors`` as read-only."""

    step: int = 1
    values: dict[str, Any] = field(default_factory=lambda: dict(INITIAL_VALUES))
    errors: dict[str, str] = field(default_factory=dict)
    status: WizardStatus = WizardStatus.EDITING
    message: Optional[str] = None

    @property
    def is_last_step(self) -> bool:
        return self.step == TOTAL_STEPS

    @property
    def progress_percent(self) -> int:
        """Share of the wizard reached, counting the current step."""
        return round(self.step / TOTAL_STEPS * 100)

    @property
    def progress_label(self) -> str:
        return f"Step {self.step} of {TOTAL_STEPS}"

    @property
    def title(self) -> str:
        return get_step_rule(self.step).title

    @property
    def step_errors(self) -> dict[str, str]:
        """Errors for the fields shown on the current step."""
        return {name: msg for name, msg in self.errors.items() if FIELD_STEPS.get(name) == self.step}


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class SetField:
    name: str
    value: Any


@dataclass(frozen=True)
class TogglePainPoint:
    option: str


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class SubmissionSucceeded:
    message: str


@dataclass(frozen=True)
class SubmissionFailed:
    message: str = SUBMIT_ERROR_MESSAGE


Action = Union[SetField, TogglePainPoint, Next, Back, KeyPress, Submit, SubmissionSucceeded, SubmissionFailed]


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class FocusField:
    field: str
    # Set for choice steps: the option to focus
    option: Optional[str] = None


@dataclass(frozen=True)
class ScrollToStep:
    step: int


@dataclass(frozen=True)
class SubmitPayload:
    submission: SanitizedIntake


Effect = Union[FocusField, ScrollToStep, SubmitPayload]


@dataclass(frozen=True)
class Transition:
    state: WizardState
    effects: tuple[Effect, ...] = ()


# =============================================================================
# Reducer
# =============================================================================


def initial_state() -> WizardState:
    return WizardState()


def entry_effects(step: int) -> tuple[Effect, ...]:
    """Scroll the step into view and focus its primary input if it has autofocus."""
    rule = get_step_rule(step)
    effects: list[Effect] = [ScrollToStep(step)]
    if rule.autofocus and rule.focus_field:
        effects.append(FocusField(rule.focus_field, rule.focus_option))
    return tuple(effects)


def _go_to(state: WizardState, step: int, **changes: Any) -> Transition:
    return Transition(replace(state, step=step, **changes), entry_effects(step))


def _set_field(state: WizardState, action: SetField) -> Transition:
    if action.name not in INITIAL_VALUES:
        raise ValueError(f"Unknown intake field: {action.name}")

    value = action.value
    if action.name == "phone_number":
        value = format_phone_number(value or "")
    elif action.name == "pain_points":
        value = tuple(value or ())

    values = {**state.values, action.name: value}
    errors = {k: v for k, v in state.errors.items() if k != action.name}
    if action.name == "industry" and value != OTHER_OPTION:
        errors.pop("custom_industry", None)
    return Transition(replace(state, values=values, errors=errors))


def _toggle_pain_point(state: WizardState, action: TogglePainPoint) -> Transition:
    if action.option not in PAIN_POINT_OPTIONS:
        raise ValueError(f"Unknown pain point: {action.option}")

    current = tuple(state.values.get("pain_points") or ())
    if action.option in current:
        selected = tuple(p for p in current if p != action.option)
    else:
        selected = current + (action.option,)

    errors = {k: v for k, v in state.errors.items() if k != "pain_points"}
    if OTHER_OPTION not in selected:
        errors.pop("custom_pain_point", None)
    return Transition(replace(state, values={**state.values, "pain_points": selected}, errors=errors))


def _next(state: WizardState) -> Transition:
    if state.is_last_step:
        return Transition(state)

    # The pain point guard reads the live selection held in ``values``
    step_errors = validate_step(state.step, state.values, strict_email=True)
    cleared = {k: v for k, v in state.errors.items() if FIELD_STEPS.get(k) != state.step}
    if step_errors:
        return Transition(replace(state, errors={**cleared, **step_errors}))
    return _go_to(state, min(state.step + 1, TOTAL_STEPS), errors=cleared)


def _back(state: WizardState) -> Transition:
    if state.step <= 1:
        return Transition(state)
    return _go_to(state, state.step - 1)


def _key_press(state: WizardState, action: KeyPress) -> Transition:
    # Enter advances; on the last step only an explicit Submit may submit
    if action.key != ENTER_KEY or state.is_last_step:
        return Transition(state)
    return _next(state)


def _submit(state: WizardState) -> Transition:
    if not state.is_last_step:
        return Transition(state)

    result = validate_submission(state.values, strict_email=True)
    if not result.is_valid:
        errors: dict[str, str] = {}
        for error in result.errors:
            errors.setdefault(error.field, error.message)
        first_step = min(FIELD_STEPS.get(error.field, TOTAL_STEPS) for error in result.errors)
        return _go_to(state, first_step, errors=errors, message=None)

    return Transition(
        replace(state, status=WizardStatus.SUBMITTING, errors={}, message=None),
        (SubmitPayload(result.submission),),
    )


def reduce(state: WizardState, action: Action) -> Transition:
    """
    Apply ``action`` to ``state``.

    Args:
        state: Current wizard state.
        action: User or network event.

    Returns:
        Transition holding the next state and the effects to run.
    """
    if state.status is WizardStatus.SUBMITTED:
        return Transition(state)

    if state.status is WizardStatus.SUBMITTING:
        if isinstance(action, SubmissionSucceeded):
            return Transition(replace(state, status=WizardStatus.SUBMITTED, message=action.message))
        if isinstance(action, SubmissionFailed):
            return Transition(replace(state, status=WizardStatus.EDITING, message=action.message))
        return Transition(state)

    if isinstance(action, SetField):
        return _set_field(state, action)
    if isinstance(action, TogglePainPoint):
        return _toggle_pain_point(state, action)
    if isinstance(action, Next):
        return _next(state)
    if isinstance(action, Back):
        return _back(state)
    if isinstance(action, KeyPress):
        return _key_press(state, action)
    if isinstance(action, Submit):
        return _submit(state)
    # Submission results only matter while a submission is in flight
    return Transition(state)
