"""Rendering of descriptors into HTML form markup."""

from .context import RenderContext
from .dispatcher import RenderDispatcher, default_strategies, render
from .fields import FieldRenderer, RenderResult
from .form import (
    FormGenerator,
    GeneratedForm,
    generate_field,
    generate_form,
    render_array_item,
)
from .styles import THEMES, stylesheet

__all__ = [
    "THEMES",
    "FieldRenderer",
    "FormGenerator",
    "GeneratedForm",
    "RenderContext",
    "RenderDispatcher",
    "RenderResult",
    "default_strategies",
    "generate_field",
    "generate_form",
    "render",
    "render_array_item",
    "stylesheet",
]
