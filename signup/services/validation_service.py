"""Per-field validation against the backend.

Usage:
    validator = FieldValidator(store, UserRepository(api), timeout=8.0)
    state = await validator.validate("username", "alice", store.snapshot())

``validate`` never raises for backend or network trouble: every outcome is a
FieldValidationState written to the store. It returns None when a newer
request for the same field superseded this one while it was in flight.
"""

from __future__ import annotations

import asyncio
from typing import Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from airlite.http import ApiConnectionError, ApiError, extract_error_message
from airlite.repositories import UserRepository

from ..errors import CONNECTIVITY_MESSAGE, INVALID_INPUT_MESSAGE
from ..schemas import FieldValidationState, ValidationRequest, ValidationResponse
from ..utils.validation import check_field
from .field_store import FieldStatusStore


class FieldValidator:
    def __init__(self, store: FieldStatusStore, users: UserRepository, timeout: float = 8.0):
        self.store = store
        self.users = users
        self.timeout = timeout

    def precheck(self, field: str, value: str, snapshot: Mapping[str, str]) -> Optional[FieldValidationState]:
        """Synchronous, zero-network checks. None means the value may go to the backend."""
        error = check_field(field, value, snapshot)
        if error:
            return FieldValidationState.invalid(error)
        return None

    def build_request(self, field: str, value: str, snapshot: Mapping[str, str]) -> ValidationRequest:
        extra = None
        if self.store.fields[field].requires_auxiliary:
            extra = {"password": snapshot.get("password") or ""}
        return ValidationRequest(field=field, value=value, extra=extra)

    async def validate(
        self,
        field: str,
        value: str,
        snapshot: Optional[Mapping[str, str]] = None,
    ) -> Optional[FieldValidationState]:
        snapshot = dict(snapshot) if snapshot is not None else self.store.snapshot()
        epoch = self.store.begin(field)

        local = self.precheck(field, value, snapshot)
        if local is not None:
            self.store.apply(field, local, epoch)
            return local

        if not self.users.supports(field):
            # No backend route for this field; the local rule is final.
            state = FieldValidationState.valid()
            self.store.apply(field, state, epoch)
            return state

        self.store.apply(field, FieldValidationState.validating(), epoch)
        request = self.build_request(field, value, snapshot)
        logger.debug(f"Validating {field} (epoch {epoch})")
        state = await self._ask_backend(request)

        if not self.store.apply(field, state, epoch):
            return None
        return state

    async def _ask_backend(self, request: ValidationRequest) -> FieldValidationState:
        try:
            data = await asyncio.wait_for(self.users.validate(request.to_payload()), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Validation of {request.field} timed out after {self.timeout}s")
            return FieldValidationState.invalid(CONNECTIVITY_MESSAGE)
        except ApiConnectionError as e:
            logger.warning(f"Validation of {request.field} could not reach the backend: {e}")
            return FieldValidationState.invalid(CONNECTIVITY_MESSAGE)
        except ApiError as e:
            # Rejections arrive as 400 {"isValid": false, "message": "..."}.
            return FieldValidationState.invalid(extract_error_message(e.payload, INVALID_INPUT_MESSAGE))

        try:
            response = ValidationResponse.model_validate(data if isinstance(data, dict) else {})
        except ValidationError as e:
            logger.warning(f"Malformed validation response for {request.field}: {e}")
            return FieldValidationState.invalid(INVALID_INPUT_MESSAGE)

        if response.is_valid:
            return FieldValidationState.valid()
        return FieldValidationState.invalid(response.message or INVALID_INPUT_MESSAGE)
