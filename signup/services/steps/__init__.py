"""Concrete signup wizard steps."""

from .account_step import AccountStep
from .role_step import RoleStep
from .topics_step import TopicsStep

__all__ = ["AccountStep", "RoleStep", "TopicsStep"]
