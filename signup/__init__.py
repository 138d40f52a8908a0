"""Signup workflow package.

Live-validated account form plus the three-step signup wizard
(account, roles, topics) for the aiRchive backend.
The entry point is `create_signup_wizard()` from `signup.app`.

Modules:
- app: logging setup and wizard factories
- errors: workflow exceptions and user-facing messages
- schemas/: pydantic models for fields, steps and wizard state
- services/: debounce, field store, validator, form orchestrator, wizard
- utils/: synchronous field rules
"""
