"""Services package initialization."""

from .debounce import DebounceMap, Debouncer
from .field_store import FieldStatusStore
from .form_service import FormOrchestrator
from .validation_service import FieldValidator
from .wizard_service import SignupWizard, WizardStep
from .steps import AccountStep, RoleStep, TopicsStep

__all__ = [
    "AccountStep",
    "DebounceMap",
    "Debouncer",
    "FieldStatusStore",
    "FieldValidator",
    "FormOrchestrator",
    "RoleStep",
    "SignupWizard",
    "TopicsStep",
    "WizardStep",
]
