"""Signup workflow exceptions and user-facing messages."""

from __future__ import annotations

REQUIRED_MESSAGE = "This field is required."
CONNECTIVITY_MESSAGE = "Could not connect to server. Please try again."
INVALID_INPUT_MESSAGE = "Invalid input"
REGISTRATION_FAILED_MESSAGE = "Registration failed. Please try again."
STEP_IN_PROGRESS_MESSAGE = "Step submission already in progress."


class SignupError(Exception):
    """Base class for signup workflow errors."""


class WizardTransitionError(SignupError):
    """Raised for a wizard move the current state does not allow."""

    def __init__(self, message: str, step: int | None = None):
        super().__init__(message)
        self.step = step
