"""Step 1: account details with live validation and registration."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from loguru import logger

from airlite.repositories import AuthRepository, UserRepository

from ...schemas import ACCOUNT_FIELDS, FieldDescriptor, StepResult
from ..field_store import FieldStatusStore
from ..form_service import FormOrchestrator
from ..validation_service import FieldValidator
from ..wizard_service import WizardStep


class AccountStep(WizardStep):
    name = "account"
    title = "Create Your Account"
    skippable = False

    def __init__(self, form: FormOrchestrator):
        self.form = form
        self.registered: Optional[Dict[str, str]] = None

    @classmethod
    def build(
        cls,
        users: UserRepository,
        auth: AuthRepository,
        debounce_delay: float = 0.4,
        timeout: float = 8.0,
        fields: Iterable[FieldDescriptor] = ACCOUNT_FIELDS,
        values: Optional[Dict[str, str]] = None,
    ) -> AccountStep:
        store = FieldStatusStore(fields, values)
        validator = FieldValidator(store, users, timeout=timeout)
        return cls(FormOrchestrator(validator, auth.register, debounce_delay=debounce_delay))

    @property
    def fields(self) -> list[FieldDescriptor]:
        return list(self.form.store.fields.values())

    def change(self, field: str, value: str):
        return self.form.change(field, value)

    async def submit(self, form_data: Dict[str, Any]) -> StepResult:
        """Validate and register. Once registered, unchanged values are accepted as-is.

        Returning to this step after registration must not re-run the
        availability checks, which would now report the account's own
        username and email as taken.
        """
        values = self.form.store.snapshot()
        if self.registered is not None and values == self.registered:
            logger.debug("Account already registered with these values, skipping re-validation")
            return StepResult.accepted(values)

        submission = await self.form.submit()
        if submission.ok:
            self.registered = dict(submission.values)
            return StepResult.accepted(submission.values)
        return StepResult.declined(submission.error, submission.field_errors)

    def close(self) -> None:
        self.form.close()
