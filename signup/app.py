"""Signup wizard factory."""

from __future__ import annotations

import sys
from typing import Dict, Optional

from loguru import logger

import config
from airlite import ApiSession, AuthRepository, RoleRepository, TopicRepository, UserRepository
from config import Settings

from .services import AccountStep, FormOrchestrator, RoleStep, SignupWizard, TopicsStep
from .services.wizard_service import CompletionCallback


def setup_logging(cfg: Optional[Settings] = None) -> None:
    cfg = cfg or config.settings
    logger.remove()
    serialize = str(cfg.log_format or "text").strip().lower() == "json"
    logger.add(sys.stdout, level=cfg.log_level.upper(), serialize=serialize)
    if cfg.log_file:
        cfg.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(cfg.log_file), level=cfg.log_level.upper(), serialize=serialize)


def build_repositories(api: ApiSession, cfg: Optional[Settings] = None) -> Dict[str, object]:
    cfg = cfg or config.settings
    return {
        "users": UserRepository(api, mode=cfg.api.validation_mode),
        "auth": AuthRepository(api),
        "roles": RoleRepository(api),
        "topics": TopicRepository(api),
    }


def create_account_form(api: Optional[ApiSession] = None, cfg: Optional[Settings] = None) -> FormOrchestrator:
    """Stand-alone live-validated account form (step 1 without the wizard)."""
    cfg = cfg or config.settings
    api = api or ApiSession.from_settings(cfg.api)
    repos = build_repositories(api, cfg)
    step = AccountStep.build(
        repos["users"],
        repos["auth"],
        debounce_delay=cfg.validation.debounce_seconds,
        timeout=cfg.validation.timeout,
    )
    return step.form


def create_signup_wizard(
    api: Optional[ApiSession] = None,
    cfg: Optional[Settings] = None,
    on_complete: Optional[CompletionCallback] = None,
) -> SignupWizard:
    """Assemble the account -> roles -> topics wizard.

    Args:
        api: shared backend session; one is built from settings when omitted
        cfg: settings override, mainly for tests
        on_complete: called once with the accumulated form data
    """
    cfg = cfg or config.settings
    api = api or ApiSession.from_settings(cfg.api)
    repos = build_repositories(api, cfg)
    steps = [
        AccountStep.build(
            repos["users"],
            repos["auth"],
            debounce_delay=cfg.validation.debounce_seconds,
            timeout=cfg.validation.timeout,
        ),
        RoleStep(repos["roles"]),
        TopicsStep(repos["topics"]),
    ]
    logger.debug(f"Signup wizard against {api.base_url} ({cfg.api.validation_mode} validation)")
    return SignupWizard(steps, on_complete=on_complete, completion_delay=cfg.wizard.completion_delay)
