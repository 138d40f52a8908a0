"""
Repository Layer - aiRchive backend endpoints grouped by business domain.

Each Repository wraps one slice of the REST contract and returns the decoded
JSON payload (plain dicts/lists). Interpretation of those payloads belongs to
the signup services.

Usage examples:
    from airlite import ApiSession, UserRepository

    api = ApiSession.from_settings()
    users = UserRepository(api)
    result = await users.validate({"field": "username", "value": "alice"})
"""

from __future__ import annotations

from typing import Dict, List

from loguru import logger

from .http import ApiSession

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------

# Path segment of each per-field validation endpoint (/users/validation/<segment>).
VALIDATION_FIELD_PATHS: Dict[str, str] = {
    "firstName": "firstname",
    "lastName": "lastname",
    "username": "username",
    "email": "email",
    "password": "password",
}


def registration_payload(values: Dict[str, str]) -> Dict[str, str]:
    """Build the /auth/register body from the accumulated account values."""
    return {
        "username": (values.get("username") or "").strip(),
        "firstName": (values.get("firstName") or "").strip(),
        "lastName": (values.get("lastName") or "").strip(),
        "email": (values.get("email") or "").strip(),
        "password": values.get("password") or "",
    }


# -----------------------------------------------------------------------------
# User Repository
# -----------------------------------------------------------------------------


class UserRepository:
    """Repository for user field validation."""

    def __init__(self, api: ApiSession, mode: str = "unified"):
        if mode not in ("unified", "per_field"):
            raise ValueError(f"Unknown validation mode: {mode}")
        self.api = api
        self.mode = mode

    def supports(self, field: str) -> bool:
        """Whether the backend has a validation route for this field."""
        if self.mode == "unified":
            return True
        return field in VALIDATION_FIELD_PATHS

    async def validate(self, payload: dict) -> dict:
        """
        Validate a single field value against the backend.

        Args:
            payload: ``{"field", "value", "extra"?}`` as sent to /users/validate

        Returns:
            Decoded response, e.g. ``{"isValid": true}``
        """
        field = payload.get("field", "")
        if self.mode == "per_field":
            segment = VALIDATION_FIELD_PATHS.get(field)
            if segment is None:
                raise ValueError(f"No per-field validation endpoint for {field!r}")
            return await self.api.post(f"/users/validation/{segment}", json={"value": payload.get("value", "")})
        return await self.api.post("/users/validate", json=payload)


# -----------------------------------------------------------------------------
# Auth Repository
# -----------------------------------------------------------------------------


class AuthRepository:
    """Repository for account registration."""

    def __init__(self, api: ApiSession):
        self.api = api

    async def register(self, values: Dict[str, str]) -> dict:
        """Create the account. Returns the created-user payload."""
        body = registration_payload(values)
        logger.debug(f"Registering account for {body['username']}")
        return await self.api.post("/auth/register", json=body)


# -----------------------------------------------------------------------------
# Role Repository
# -----------------------------------------------------------------------------


class RoleRepository:
    """Repository for author requests and admin verification."""

    def __init__(self, api: ApiSession):
        self.api = api

    async def request_author(self) -> dict:
        return await self.api.post("/roles/request-author")

    async def verify_admin(self, password: str) -> dict:
        return await self.api.post("/roles/verify-admin", json={"password": password})


# -----------------------------------------------------------------------------
# Topic Repository
# -----------------------------------------------------------------------------


class TopicRepository:
    """Repository for topic listing and interest registration."""

    def __init__(self, api: ApiSession):
        self.api = api

    async def list_topics(self) -> List[dict]:
        data = await self.api.get("/topics")
        if isinstance(data, dict):
            # Paged variant: {"content": [...], "page": ...}.
            data = data.get("content") or []
        return [t for t in data if isinstance(t, dict)]

    async def save_interests(self, topic_codes: List[str]) -> dict:
        return await self.api.post("/topics/interests", json={"topicCodes": list(topic_codes)})
