"""Declarative behavior bindings.

Renderers and the rule compiler never emit executable code. They describe
behavior as data (``Binding``) and a single fixed interpreter attaches the
described handlers in the browser.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
import json
from types import MappingProxyType
from typing import Any

# Effects understood by the interpreter
VALIDATE = "validate"
TOGGLE_VISIBILITY = "toggle-visibility"
ARRAY_ADD = "array-add"
ARRAY_REMOVE = "array-remove"
SELECT_ALTERNATIVE = "select-alternative"
PREVIEW_FILE = "preview-file"
READ_TEXT_FILE = "read-text-file"
MIRROR_VALUE = "mirror-value"
STAR_RATING = "star-rating"

EFFECTS = frozenset(
    {
        VALIDATE,
        TOGGLE_VISIBILITY,
        ARRAY_ADD,
        ARRAY_REMOVE,
        SELECT_ALTERNATIVE,
        PREVIEW_FILE,
        READ_TEXT_FILE,
        MIRROR_VALUE,
        STAR_RATING,
    }
)


@dataclass(frozen=True)
class Binding:
    """One event handler to attach: on ``event`` at ``path``, run ``effect``."""

    path: str
    event: str
    effect: str
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if self.effect not in EFFECTS:
            raise ValueError(f"Unknown behavior effect '{self.effect}'")
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize the binding for the interpreter."""
        return {
            "path": self.path,
            "event": self.event,
            "effect": self.effect,
            "params": dict(self.params),
        }


@lru_cache(maxsize=1)
def interpreter_source() -> str:
    """The browser-side interpreter shipped with the package."""
    return resources.files(__package__).joinpath("interpreter.js").read_text("utf-8")


@dataclass(frozen=True)
class BehaviorScript:
    """A set of bindings serialized together with the interpreter."""

    bindings: tuple[Binding, ...] = ()

    @classmethod
    def collect(cls, *groups: Iterable[Binding]) -> "BehaviorScript":
        """Concatenate binding groups, keeping their order."""
        return cls(tuple(binding for group in groups for binding in group))

    def to_json(self) -> str:
        """Serialize bindings to JSON that is safe inside a script element."""
        payload = json.dumps(
            [binding.to_dict() for binding in self.bindings], default=str
        )
        return payload.replace("</", "<\\/")

    def render(self, form_id: str) -> str:
        """JavaScript source attaching the bindings to the form ``form_id``."""
        if not self.bindings:
            return ""
        return (
            f"{interpreter_source()}\n"
            f"window.formgen.attach({json.dumps(form_id)}, {self.to_json()});\n"
        )

    def __len__(self) -> int:
        return len(self.bindings)
