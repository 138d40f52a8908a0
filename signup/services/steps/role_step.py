"""Step 2: optional author request and admin verification."""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger

from airlite.http import ApiConnectionError, ApiError, extract_error_message
from airlite.repositories import RoleRepository

from ...errors import CONNECTIVITY_MESSAGE
from ...schemas import StepResult
from ..wizard_service import WizardStep

ADMIN_PASSWORD_REQUIRED = "Admin password is required."
ADMIN_VERIFY_FAILED = "Invalid admin password"
ADMIN_DIALOG_OPEN = "Finish or cancel admin verification first."
AUTHOR_REQUEST_FAILED = "Author request failed"


class RoleStep(WizardStep):
    name = "roles"
    title = "Choose Your Role"
    skippable = True

    def __init__(self, roles: RoleRepository, form_data: Optional[Dict[str, Any]] = None):
        form_data = form_data or {}
        self.roles = roles
        self.author_intent = bool(form_data.get("requestAuthor", False))
        self.admin_verified = bool(form_data.get("isAdmin", False))
        self.admin_dialog_open = False
        self.admin_error: Optional[str] = None
        self.verifying = False
        self.submit_error: Optional[str] = None

    def set_author_intent(self, flag: bool) -> None:
        self.author_intent = bool(flag)

    def set_admin(self, checked: bool) -> Optional[StepResult]:
        """Checking admin opens verification; unchecking drops any verification."""
        if checked:
            return self.request_admin()
        self.admin_verified = False
        return None

    def request_admin(self) -> StepResult:
        self.admin_dialog_open = True
        self.admin_error = None
        return StepResult.pending_verification()

    def cancel_admin(self) -> None:
        self.admin_dialog_open = False
        self.admin_error = None

    async def verify_admin(self, password: str) -> StepResult:
        """Check the admin password. The dialog stays open on failure."""
        if not self.admin_dialog_open:
            self.request_admin()
        if not password:
            self.admin_error = ADMIN_PASSWORD_REQUIRED
            return StepResult.pending_verification(self.admin_error)

        self.verifying = True
        self.admin_error = None
        try:
            await self.roles.verify_admin(password)
        except ApiConnectionError:
            self.admin_error = CONNECTIVITY_MESSAGE
        except ApiError as e:
            self.admin_error = extract_error_message(e.payload, ADMIN_VERIFY_FAILED)
        finally:
            self.verifying = False

        if self.admin_error:
            logger.info(f"Admin verification failed: {self.admin_error}")
            return StepResult.pending_verification(self.admin_error)

        self.admin_verified = True
        self.admin_dialog_open = False
        return StepResult.accepted({"isAdmin": True})

    async def submit(self, form_data: Dict[str, Any]) -> StepResult:
        self.submit_error = None
        if self.admin_dialog_open:
            return StepResult.pending_verification(ADMIN_DIALOG_OPEN)

        if self.author_intent:
            try:
                await self.roles.request_author()
            except ApiConnectionError:
                self.submit_error = CONNECTIVITY_MESSAGE
            except ApiError as e:
                self.submit_error = extract_error_message(e.payload, AUTHOR_REQUEST_FAILED)
            if self.submit_error:
                logger.warning(f"Author request failed: {self.submit_error}")
                return StepResult.declined(self.submit_error)

        return StepResult.accepted({"requestAuthor": self.author_intent, "isAdmin": self.admin_verified})
