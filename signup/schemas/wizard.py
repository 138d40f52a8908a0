"""Pydantic schemas for the signup wizard."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class StepOutcome(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PENDING_VERIFICATION = "pending_verification"


class StepResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: StepOutcome
    values: dict[str, Any] = Field(default_factory=dict)
    message: Optional[str] = None
    field_errors: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def accepted(cls, values: dict[str, Any] | None = None) -> StepResult:
        return cls(outcome=StepOutcome.ACCEPTED, values=values or {})

    @classmethod
    def declined(cls, message: str | None = None, field_errors: dict[str, str] | None = None) -> StepResult:
        return cls(outcome=StepOutcome.DECLINED, message=message, field_errors=field_errors or {})

    @classmethod
    def pending_verification(cls, message: str | None = None) -> StepResult:
        return cls(outcome=StepOutcome.PENDING_VERIFICATION, message=message)


class WizardState(BaseModel):
    total_steps: int = Field(ge=1)
    current_step: int = 1
    form_data: dict[str, Any] = Field(default_factory=dict)
    completed: bool = False

    @property
    def completing(self) -> bool:
        return self.current_step > self.total_steps


class FormSubmission(BaseModel):
    ok: bool
    values: dict[str, str] = Field(default_factory=dict)
    field_errors: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None
    payload: Any = None


class Topic(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    code: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "fullName"))
    topic_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("topicId", "id"))
