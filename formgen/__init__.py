"""formgen - HTML forms generated from Pydantic schemas, validated against the same schema."""

__version__ = "0.1.0"

from .config import FieldOptions, FormOptions, FormgenSettings, RuleOptions, get_settings
from .core import (
    FieldDescriptor,
    FieldKind,
    FormInstanceCache,
    FormInstanceNotFound,
    SchemaIntrospectionError,
    map_schema,
)
from .render import GeneratedForm, generate_field, generate_form, render_array_item
from .validation import ValidationBridge, ValidationResult, validate, validate_field

__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "FieldOptions",
    "FormInstanceCache",
    "FormInstanceNotFound",
    "FormOptions",
    "FormgenSettings",
    "GeneratedForm",
    "RuleOptions",
    "SchemaIntrospectionError",
    "ValidationBridge",
    "ValidationResult",
    "__version__",
    "generate_field",
    "generate_form",
    "get_settings",
    "map_schema",
    "render_array_item",
    "validate",
    "validate_field",
]
