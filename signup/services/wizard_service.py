"""Linear multi-step signup wizard.

Transition table (N = number of steps, Completing = N + 1):

    state        next (accepted)   next (declined/pending)   skip             back
    Step_1       Step_2            Step_1                    if skippable     error
    Step_k       Step_k+1          Step_k                    if skippable     Step_k-1
    Step_N       Completing        Step_N                    if skippable     Step_N-1
    Completing   error             error                     error            error

Entering Completing plays a cosmetic delay and then fires ``on_complete``
exactly once. While a step submission is in flight, a second next() is
declined and skip/back raise.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from ..errors import STEP_IN_PROGRESS_MESSAGE, WizardTransitionError
from ..schemas import StepOutcome, StepResult, WizardState

CompletionCallback = Callable[[Dict[str, Any]], Any]


class WizardStep:
    """Base class for a wizard screen."""

    name: str = ""
    title: str = ""
    skippable: bool = False

    async def submit(self, form_data: Dict[str, Any]) -> StepResult:
        raise NotImplementedError

    def close(self) -> None:
        pass


class SignupWizard:
    def __init__(
        self,
        steps: Sequence[WizardStep],
        on_complete: Optional[CompletionCallback] = None,
        completion_delay: float = 1.5,
        form_data: Optional[Dict[str, Any]] = None,
    ):
        if not steps:
            raise ValueError("SignupWizard needs at least one step")
        self.steps: List[WizardStep] = list(steps)
        self.state = WizardState(total_steps=len(self.steps), form_data=dict(form_data or {}))
        self.completion_delay = max(0.0, completion_delay)
        self._on_complete = on_complete
        self._completion_task: Optional[asyncio.Task] = None
        self._busy = False

    # -- state ----------------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self.state.current_step

    @property
    def completing(self) -> bool:
        return self.state.completing

    @property
    def completed(self) -> bool:
        return self.state.completed

    @property
    def form_data(self) -> Dict[str, Any]:
        return self.state.form_data

    @property
    def current(self) -> Optional[WizardStep]:
        if self.completing:
            return None
        return self.steps[self.state.current_step - 1]

    @property
    def progress(self) -> float:
        """Percentage shown on the progress bar."""
        if self.completing:
            return 100.0
        return (self.state.current_step - 1) / self.state.total_steps * 100.0

    def _ensure_active(self, action: str) -> WizardStep:
        step = self.current
        if step is None:
            raise WizardTransitionError(f"Cannot {action}: signup is completing", self.state.current_step)
        return step

    def _ensure_idle(self, action: str) -> WizardStep:
        step = self._ensure_active(action)
        if self._busy:
            raise WizardTransitionError(f"Cannot {action}: step submission in progress", self.state.current_step)
        return step

    # -- transitions ----------------------------------------------------------

    async def next(self) -> StepResult:
        """Submit the current step and advance if it was accepted.

        Only one submission runs at a time; an overlapping call is declined
        without touching the step.
        """
        step = self._ensure_active("continue")
        if self._busy:
            return StepResult.declined(STEP_IN_PROGRESS_MESSAGE)

        self._busy = True
        try:
            result = await step.submit(dict(self.state.form_data))
        finally:
            self._busy = False

        if result.outcome is StepOutcome.ACCEPTED:
            self.state.form_data.update(result.values)
            self._advance()
        else:
            logger.info(f"Step {step.name or self.state.current_step} not accepted: {result.outcome.value}")
        return result

    def skip(self) -> None:
        step = self._ensure_idle("skip")
        if not step.skippable:
            raise WizardTransitionError(f"Step {step.name or self.state.current_step} cannot be skipped", self.state.current_step)
        logger.debug(f"Skipping step {self.state.current_step}")
        self._advance()

    def back(self) -> None:
        self._ensure_idle("go back")
        if self.state.current_step <= 1:
            raise WizardTransitionError("Already at the first step", self.state.current_step)
        self.state.current_step -= 1
        logger.debug(f"Back to step {self.state.current_step}")

    def _advance(self) -> None:
        # Completing is terminal; it is entered once.
        if self.completing or self._completion_task is not None:
            return
        self.state.current_step += 1
        if self.completing:
            logger.info("All signup steps done, completing")
            self._completion_task = asyncio.ensure_future(self._complete())
        else:
            logger.debug(f"Advanced to step {self.state.current_step}")

    async def _complete(self) -> None:
        if self.completion_delay > 0:
            await asyncio.sleep(self.completion_delay)
        self.state.completed = True
        if self._on_complete is None:
            return
        try:
            result = self._on_complete(dict(self.state.form_data))
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"on_complete callback failed: {e}")

    async def wait_complete(self) -> None:
        """Wait for the completion delay and ``on_complete`` to finish."""
        if self._completion_task is not None:
            await self._completion_task

    def close(self) -> None:
        for step in self.steps:
            step.close()
        if self._completion_task is not None and not self._completion_task.done():
            self._completion_task.cancel()
