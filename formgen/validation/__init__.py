"""Validation of form submissions against their schema."""

from .bridge import ValidationBridge, locate_error, validate, validate_field
from .errors import (
    FORM_ERROR_KEY,
    FieldValidationResult,
    ValidationFailure,
    ValidationResult,
)
from .submission import FORM_ID_FIELD, decode_submission, decode_value

__all__ = [
    "FORM_ERROR_KEY",
    "FORM_ID_FIELD",
    "FieldValidationResult",
    "ValidationBridge",
    "ValidationFailure",
    "ValidationResult",
    "decode_submission",
    "decode_value",
    "locate_error",
    "validate",
    "validate_field",
]
