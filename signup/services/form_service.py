"""Form orchestration: keystroke handling, submit gating and submission.

Keystrokes and submit share one rule: every validation goes through
FieldValidator, which takes a fresh per-field epoch from the store, so the
most recently *issued* request wins whether it came from a debounce timer or
from the forced re-validation on submit.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from loguru import logger

from airlite.http import ApiConnectionError, ApiError, extract_error_message

from ..errors import CONNECTIVITY_MESSAGE, REGISTRATION_FAILED_MESSAGE
from ..schemas import FieldValidationState, FormSubmission
from .debounce import DebounceMap
from .validation_service import FieldValidator

SubmitAction = Callable[[Dict[str, str]], Awaitable[Any]]

# Field whose value is auxiliary context for fields with requires_auxiliary.
AUXILIARY_SOURCE = "password"


class FormOrchestrator:
    def __init__(
        self,
        validator: FieldValidator,
        action: SubmitAction,
        debounce_delay: float = 0.4,
        failure_message: str = REGISTRATION_FAILED_MESSAGE,
    ):
        self.validator = validator
        self.store = validator.store
        self.failure_message = failure_message
        self.root_error: str | None = None
        self.submitting = False
        self._action = action
        self._debouncers = DebounceMap(self._debounced_validation, debounce_delay)

    def _debounced_validation(self, field: str):
        async def _run(value: str, snapshot: Dict[str, str]) -> None:
            await self.validator.validate(field, value, snapshot)

        return _run

    @property
    def is_submittable(self) -> bool:
        return self.store.is_submittable

    def change(self, field: str, value: str) -> FieldValidationState:
        """Handle a keystroke in ``field``. Returns the field's state right after.

        Values that fail the local rules are settled synchronously. Anything
        that needs a backend check is debounced on the running event loop, so
        such a change raises RuntimeError outside one and leaves the store
        untouched.
        """
        self.store.value(field)  # KeyError for unknown fields
        snapshot = self.store.snapshot()
        snapshot[field] = value or ""

        targets = [field]
        if field == AUXILIARY_SOURCE:
            # Re-check the confirmation against the new password; it must
            # not stay valid while that check is pending.
            targets += [
                name
                for name, descriptor in self.store.fields.items()
                if descriptor.requires_auxiliary and snapshot.get(name)
            ]
        plan = [(name, snapshot[name], self.validator.precheck(name, snapshot[name], snapshot)) for name in targets]
        if any(local is None for _, _, local in plan):
            asyncio.get_running_loop()

        self.store.set_value(field, value)
        for name, name_value, local in plan:
            self._schedule(name, name_value, local, snapshot)
        return self.store.get(field)

    def _schedule(
        self, field: str, value: str, local: Optional[FieldValidationState], snapshot: Dict[str, str]
    ) -> None:
        if local is not None:
            self._debouncers.cancel(field)
            self.store.apply(field, local, self.store.begin(field))
            return
        debouncer = self._debouncers.get(field)
        self.store.touch(field)
        debouncer(value, snapshot)

    async def submit(self) -> FormSubmission:
        """Re-validate every required field, then run the action once.

        The action is skipped when any field fails. A failing action leaves
        the entered values in place and sets ``root_error``.
        """
        if self.submitting:
            return FormSubmission(ok=False, values=self.store.snapshot(), error="Submission already in progress.")

        self.submitting = True
        self.root_error = None
        try:
            self._debouncers.cancel_all()
            snapshot = self.store.snapshot()
            await asyncio.gather(
                *(self.validator.validate(name, snapshot.get(name, ""), snapshot) for name in self.store.required_fields)
            )

            if not self.store.is_submittable:
                errors = self.store.errors()
                logger.info(f"Submit blocked by field errors: {sorted(errors)}")
                return FormSubmission(ok=False, values=snapshot, field_errors=errors)

            try:
                payload = await self._action(snapshot)
            except ApiConnectionError as e:
                logger.warning(f"Submit could not reach the backend: {e}")
                self.root_error = CONNECTIVITY_MESSAGE
            except ApiError as e:
                logger.info(f"Submit rejected ({e.status}): {e.message}")
                self.root_error = extract_error_message(e.payload, self.failure_message)
            else:
                logger.info("Form submitted")
                return FormSubmission(ok=True, values=snapshot, payload=payload)

            return FormSubmission(ok=False, values=snapshot, error=self.root_error)
        finally:
            self.submitting = False

    async def wait_idle(self) -> None:
        """Wait for pending debounce timers and the validations they start."""
        await self._debouncers.wait_all()

    def close(self) -> None:
        self._debouncers.close()
        self.store.clear_listeners()
