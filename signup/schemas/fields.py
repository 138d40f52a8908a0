"""Pydantic schemas for form fields and their validation state."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"


class FieldStatus(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    requires_auxiliary: bool = False  # confirmPassword carries the sibling password
    required: bool = True


class FieldValidationState(BaseModel):
    """Status of one field. Replaced, never mutated, on every transition."""

    model_config = ConfigDict(frozen=True)

    status: FieldStatus = FieldStatus.IDLE
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> FieldValidationState:
        return cls()

    @classmethod
    def validating(cls) -> FieldValidationState:
        return cls(status=FieldStatus.VALIDATING)

    @classmethod
    def valid(cls) -> FieldValidationState:
        return cls(status=FieldStatus.VALID)

    @classmethod
    def invalid(cls, message: str) -> FieldValidationState:
        return cls(status=FieldStatus.INVALID, message=message)

    @property
    def is_valid(self) -> bool:
        return self.status is FieldStatus.VALID


class ValidationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    field: str
    value: str
    extra: Optional[dict[str, str]] = None

    def to_payload(self) -> dict:
        payload: dict = {"field": self.field, "value": self.value}
        if self.extra is not None:
            payload["extra"] = dict(self.extra)
        return payload


class ValidationResponse(BaseModel):
    # The unified endpoint answers {"isValid": ...}; the per-field endpoints
    # serialise a record as {"valid": ...}.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    is_valid: bool = Field(default=False, validation_alias=AliasChoices("isValid", "valid", "is_valid"))
    message: Optional[str] = None


ACCOUNT_FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor(name="firstName", label="First Name"),
    FieldDescriptor(name="lastName", label="Last Name"),
    FieldDescriptor(name="username", label="Username"),
    FieldDescriptor(name="email", label="Email", kind=FieldKind.EMAIL),
    FieldDescriptor(name="password", label="Password", kind=FieldKind.PASSWORD),
    FieldDescriptor(
        name="confirmPassword",
        label="Confirm Password",
        kind=FieldKind.PASSWORD,
        requires_auxiliary=True,
    ),
)
