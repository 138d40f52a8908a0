"""Pydantic schemas."""

from .fields import (
    ACCOUNT_FIELDS,
    FieldDescriptor,
    FieldKind,
    FieldStatus,
    FieldValidationState,
    ValidationRequest,
    ValidationResponse,
)
from .wizard import FormSubmission, StepOutcome, StepResult, Topic, WizardState

__all__ = [
    "ACCOUNT_FIELDS",
    "FieldDescriptor",
    "FieldKind",
    "FieldStatus",
    "FieldValidationState",
    "FormSubmission",
    "StepOutcome",
    "StepResult",
    "Topic",
    "ValidationRequest",
    "ValidationResponse",
    "WizardState",
]
