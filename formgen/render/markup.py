"""Small helpers for building escaped HTML fragments."""

from collections.abc import Mapping
import datetime as dt
from enum import Enum
from html import escape
import re
from typing import Any

from pydantic import SecretStr

from ..core.paths import MISSING

DEFAULT_CLASSES: dict[str, str] = {
    "form": "zf-form",
    "field": "zf-field",
    "label": "zf-label",
    "input": "zf-input",
    "select": "zf-select",
    "textarea": "zf-textarea",
    "checkbox": "zf-checkbox",
    "radio": "zf-radio",
    "button": "zf-button",
    "error": "zf-error",
    "help": "zf-help",
    "fieldset": "zf-fieldset",
    "legend": "zf-legend",
    "array": "zf-array",
    "array_items": "zf-array-items",
    "array_item": "zf-array-item",
    "array_controls": "zf-array-controls",
    "submit_button": "zf-submit",
}

_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def attributes(attrs: Mapping[str, Any]) -> str:
    """Render an attribute mapping; ``None``/``False`` drop the attribute."""
    parts = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(key)
        else:
            parts.append(f'{key}="{escape(str(value), quote=True)}"')
    return " ".join(parts)


def tag(name: str, attrs: Mapping[str, Any] | None = None, content: str | None = None) -> str:
    """Render an element; ``content=None`` renders a void element."""
    rendered = attributes(attrs or {})
    opening = f"<{name} {rendered}>" if rendered else f"<{name}>"
    if content is None:
        return opening
    return f"{opening}{content}</{name}>"


def text(value: Any) -> str:
    """Escape text content."""
    return escape(format_value(value), quote=False)


def format_value(value: Any) -> str:
    """String form of a value as it appears in an input."""
    if value is None or value is MISSING:
        return ""
    if isinstance(value, SecretStr):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, dt.datetime):
        return value.strftime("%Y-%m-%dT%H:%M")
    if isinstance(value, dt.date | dt.time):
        return value.isoformat()
    return str(value)


def dom_id(path: str, namespace: str = "") -> str:
    """Element id derived from a canonical path."""
    slug = _ID_UNSAFE.sub("-", path).strip("-")
    return f"{namespace}-{slug}" if namespace else slug
