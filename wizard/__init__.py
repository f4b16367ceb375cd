"""
FRAQTIV Intake Wizard
UI-independent state machine, controller and API client for the intake form.
"""
from wizard.client import IntakeClient, SubmitResult
from wizard.controller import WizardController, WizardView
from wizard.formatting import format_phone_number
from wizard.state import (
    Back,
    FocusField,
    KeyPress,
    Next,
    ScrollToStep,
    SetField,
    Submit,
    SubmissionFailed,
    SubmissionSucceeded,
    SubmitPayload,
    TogglePainPoint,
    Transition,
    WizardState,
    WizardStatus,
    initial_state,
    reduce,
)

__all__ = [
    "Back",
    "FocusField",
    "IntakeClient",
    "KeyPress",
    "Next",
    "ScrollToStep",
    "SetField",
    "Submit",
    "SubmissionFailed",
    "SubmissionSucceeded",
    "SubmitPayload",
    "SubmitResult",
    "TogglePainPoint",
    "Transition",
    "WizardController",
    "WizardState",
    "WizardStatus",
    "WizardView",
    "format_phone_number",
    "initial_state",
    "reduce",
]
