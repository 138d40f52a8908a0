"""Shared pytest fixtures and test configuration.

This module provides common fixtures and utilities for all tests.
"""

from __future__ import annotations

import os
import sys

import pytest

# Ensure repo root is on sys.path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


def configure_test_env() -> None:
    """Configure environment variables for testing.

    Keeps debounce and completion delays short so async tests stay fast, and
    points the API at an address nothing listens on.
    """
    os.environ.setdefault("AIRCHIVE_LOG_LEVEL", "ERROR")
    os.environ.setdefault("AIRCHIVE_API_BASE_URL", "http://127.0.0.1:9/api")
    os.environ.setdefault("AIRCHIVE_VALIDATION_DEBOUNCE_MS", "10")
    os.environ.setdefault("AIRCHIVE_VALIDATION_TIMEOUT", "1.0")
    os.environ.setdefault("AIRCHIVE_WIZARD_COMPLETION_DELAY", "0")


# Configure test environment on import
configure_test_env()


@pytest.fixture
def users():
    """Backend validation fake that accepts everything."""
    from tests.fakes import FakeUserRepository

    return FakeUserRepository()


@pytest.fixture
def store():
    """Fresh store over the signup account fields."""
    from signup.schemas import ACCOUNT_FIELDS
    from signup.services import FieldStatusStore

    return FieldStatusStore(ACCOUNT_FIELDS)


@pytest.fixture
def valid_account() -> dict:
    """Account values that pass every local rule."""
    from tests.fakes import VALID_ACCOUNT

    return dict(VALID_ACCOUNT)


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging():
    """Route loguru through the configured (ERROR) level for the whole run."""
    from signup.app import setup_logging

    setup_logging()
    yield
