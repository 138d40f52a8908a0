"""Test package for the aiRchive signup client.

- **unit/**: Unit tests for individual modules
  - test_debounce.py: Debouncer / DebounceMap timing
  - test_field_store.py: Field status store and epoch guard
  - test_validation_rules.py: Local field rules
  - test_validation_service.py: Per-field backend validation
  - test_form_service.py: Form orchestration and submit gating
  - test_wizard_service.py: Wizard transitions
  - test_steps.py: Account / role / topics steps
  - test_http.py, test_repositories.py: Backend client
  - test_schemas.py: Pydantic schemas
  - test_config_*.py: Settings and config CLI

Shared fakes live in tests/fakes.py.

Running tests:
    pytest tests/
"""
