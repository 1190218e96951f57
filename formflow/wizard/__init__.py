"""
Stepped form session core: field validation, draft store and step sequencer.
"""
from .drafts import DraftStore
from .state_manager import FormDraft, FormSession, SessionState, SessionStatus
from .steps import FieldSpec, StepDefinition, WizardDefinition
from .validation import FormValidationError, ValidationResult, validate_all, validate_step

__all__ = [
    "DraftStore",
    "FieldSpec",
    "FormDraft",
    "FormSession",
    "FormValidationError",
    "SessionState",
    "SessionStatus",
    "StepDefinition",
    "ValidationResult",
    "WizardDefinition",
    "validate_all",
    "validate_step",
]
