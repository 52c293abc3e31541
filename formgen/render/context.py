"""Render context: values, errors and presentation settings for one render."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from ..config import FormOptions
from ..core.paths import MISSING, value_at
from .markup import DEFAULT_CLASSES, dom_id


@dataclass(frozen=True)
class RenderContext:
    """State shared by all renderers during one render pass.

    ``values`` is the nested value structure of the form. ``overrides`` holds
    values keyed by exact path and wins over ``values``; record entries use it
    because their rendered paths differ from their data location.
    ``bare_path`` marks a path rendered without its field wrapper, which is
    how union alternatives share the path of their union.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    errors: Mapping[str, str] = field(default_factory=dict)
    overrides: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    namespace: str = "zf"
    interactive: bool = True
    validate_url: str | None = None
    classes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_CLASSES))
    hidden: frozenset[str] = frozenset()
    disabled_reason: str | None = None
    bare_path: str | None = None

    @classmethod
    def create(
        cls,
        values: Mapping[str, Any] | None = None,
        errors: Mapping[str, str] | None = None,
        options: FormOptions | None = None,
    ) -> "RenderContext":
        """Build a context from form options."""
        options = options or FormOptions()
        return cls(
            values=dict(values or {}),
            errors=dict(errors or {}),
            namespace=options.id_namespace,
            interactive=options.interactive,
            validate_url=options.validate_url,
            classes={**DEFAULT_CLASSES, **options.custom_classes},
        )

    @property
    def disabled(self) -> bool:
        """Whether controls rendered in this context are inactive."""
        return self.disabled_reason is not None

    def disabled_attrs(self) -> dict[str, Any]:
        """Attributes marking a control as inactive, tagged for the interpreter."""
        if self.disabled_reason is None:
            return {}
        return {"disabled": True, f"data-formgen-disabled-{self.disabled_reason}": "1"}

    def value_at(self, path: str) -> Any:
        """Current value at ``path`` or ``MISSING``."""
        if path in self.overrides:
            return self.overrides[path]
        return value_at(self.values, path)

    def error_for(self, path: str) -> str | None:
        """Error message for ``path`` if any."""
        return self.errors.get(path)

    def dom_id(self, path: str) -> str:
        """Namespaced element id for ``path``."""
        return dom_id(path, self.namespace)

    def css(self, role: str, *extra: str) -> str:
        """Class attribute value for a structural role."""
        return " ".join(part for part in (self.classes.get(role, ""), *extra) if part)

    def with_overrides(
        self, values: Mapping[str, Any], errors: Mapping[str, str | None] | None = None
    ) -> "RenderContext":
        """Copy with exact-path values and errors added."""
        merged_errors = dict(self.errors)
        for path, message in (errors or {}).items():
            if message is not None:
                merged_errors[path] = message
        return replace(
            self,
            overrides=MappingProxyType({**self.overrides, **values}),
            errors=merged_errors,
        )

    def deactivated(self, reason: str) -> "RenderContext":
        """Copy whose controls render disabled, tagged with ``reason``."""
        if self.disabled:
            return self
        return replace(self, disabled_reason=reason)
