"""
Wizard controller.

Owns the current WizardState, feeds actions through the reducer and carries
out the resulting effects against a view and the intake client.
"""
from typing import Protocol

import structlog

from wizard.client import IntakeClient
from wizard.state import (
    Action,
    Effect,
    FocusField,
    KeyPress,
    ScrollToStep,
    SubmissionFailed,
    SubmissionSucceeded,
    SubmitPayload,
    WizardState,
    entry_effects,
    initial_state,
    reduce,
)


logger = structlog.get_logger(__name__)


class WizardView(Protocol):
    """What the controller needs from whatever renders the wizard."""

    def render(self, state: WizardState) -> None: ...

    def focus(self, effect: FocusField) -> None: ...

    def scroll_into_view(self, step: int) -> None: ...


class WizardController:
    def __init__(self, client: IntakeClient, view: WizardView, state: WizardState | None = None):
        self.client = client
        self.view = view
        self.state = state or initial_state()

    async def start(self) -> WizardState:
        """Render the first step and run its entry effects."""
        self.view.render(self.state)
        await self._run_effects(entry_effects(self.state.step))
        return self.state

    async def dispatch(self, action: Action) -> WizardState:
        transition = reduce(self.state, action)
        changed = transition.state is not self.state
        self.state = transition.state
        if changed:
            self.view.render(self.state)
        await self._run_effects(transition.effects)
        return self.state

    async def handle_key(self, key: str) -> WizardState:
        return await self.dispatch(KeyPress(key))

    async def _run_effects(self, effects: tuple[Effect, ...]) -> None:
        for effect in effects:
            if isinstance(effect, ScrollToStep):
                self.view.scroll_into_view(effect.step)
            elif isinstance(effect, FocusField):
                self.view.focus(effect)
            elif isinstance(effect, SubmitPayload):
                await self._submit(effect)

    async def _submit(self, effect: SubmitPayload) -> None:
        logger.info("intake_submitting")
        try:
            result = await self.client.submit(effect.submission)
        except Exception as e:
            # The wizard must leave SUBMITTING whatever the client raises
            logger.error("intake_submit_failed", error=str(e), error_type=type(e).__name__)
            await self.dispatch(SubmissionFailed())
            return

        if result.success:
            await self.dispatch(SubmissionSucceeded(result.message))
        else:
            await self.dispatch(SubmissionFailed(result.message))
