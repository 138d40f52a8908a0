"""aiRchive backend access: HTTP session and per-domain repositories."""

from .http import ApiConnectionError, ApiError, ApiSession
from .repositories import AuthRepository, RoleRepository, TopicRepository, UserRepository

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "ApiSession",
    "AuthRepository",
    "RoleRepository",
    "TopicRepository",
    "UserRepository",
]
