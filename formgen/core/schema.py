"""Field descriptor data structures.

Descriptors are the schema-independent description of a form field. They are
produced by the descriptor mapper and consumed by the render dispatcher, the
conditional rule compiler and the validation bridge. Every descriptor tree is
immutable and built fresh for each mapping call.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic_core import PydanticUndefined

from ..config import FieldOptions
from .paths import PathSegment, entry_path, is_within, parse_path

if TYPE_CHECKING:
    from .introspector import SchemaNode


class FieldKind(str, Enum):
    """Structural kinds a schema node can be mapped to."""

    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    TEXTAREA = "textarea"
    NUMBER = "number"
    RANGE = "range"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUM = "enum"
    FILE = "file"
    OBJECT = "object"
    ARRAY = "array"
    RECORD = "record"
    UNION = "union"


CONTAINER_KINDS = frozenset({FieldKind.OBJECT, FieldKind.ARRAY, FieldKind.RECORD})


class SchemaIntrospectionError(Exception):
    """Raised when a schema node cannot be classified."""

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.node = node


class UnsupportedFieldKind(Exception):
    """Names a field kind without a render strategy.

    Dispatch never raises it; unknown kinds are rendered as text instead.
    """

    def __init__(self, kind: str):
        super().__init__(f"No render strategy registered for field kind '{kind}'")
        self.kind = kind


class MissingControllingField(Exception):
    """A conditional rule names a controlling field that does not exist."""

    def __init__(self, target_field: str, controlling_field: str):
        super().__init__(
            f"Conditional rule for '{target_field}' references unknown "
            f"controlling field '{controlling_field}'"
        )
        self.target_field = target_field
        self.controlling_field = controlling_field


@dataclass(frozen=True)
class Constraints:
    """Validation constraints extracted from a schema node."""

    required: bool = True
    min_length: int | None = None
    max_length: int | None = None
    min: Any = None
    max: Any = None
    step: Any = None
    pattern: str | None = None
    integer: bool = False
    # Bounds the value itself may not reach
    exclusive_min: bool = False
    exclusive_max: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize the constraints that are actually set."""
        data: dict[str, Any] = {"required": self.required}
        for key, value in (
            ("minLength", self.min_length),
            ("maxLength", self.max_length),
            ("min", self.min),
            ("max", self.max),
            ("step", self.step),
            ("pattern", self.pattern),
        ):
            if value is not None:
                data[key] = value if isinstance(value, int | float | str) else str(value)
        if self.integer:
            data["integer"] = True
        if self.exclusive_min:
            data["exclusiveMin"] = True
        if self.exclusive_max:
            data["exclusiveMax"] = True
        return data


@dataclass(frozen=True)
class Option:
    """A choice of an enum-kind field.

    ``value`` is the submitted text, ``raw`` the schema value it stands for.
    """

    value: str
    label: str
    raw: Any = field(default=None, compare=False)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def humanize(name: str) -> str:
    """Turn a field name into a display label (``firstName`` -> ``First Name``)."""
    words = _CAMEL_BOUNDARY.sub(" ", name.replace("_", " ")).strip()
    return words[:1].upper() + words[1:]


@dataclass(frozen=True)
class FieldDescriptor:
    """Everything needed to render and validate one field.

    ``path`` is the canonical path of the field and doubles as the submitted
    input name. Array and record descriptors carry an ``item`` template whose
    path ends in ``[*]``; concrete items are obtained with :meth:`at`.
    Union alternatives share the path of the union itself.
    """

    name: str
    path: str
    kind: FieldKind
    constraints: Constraints = field(default_factory=Constraints)
    hints: FieldOptions = field(default_factory=FieldOptions)
    children: Mapping[str, "FieldDescriptor"] = field(
        default_factory=lambda: MappingProxyType({})
    )
    item: "FieldDescriptor | None" = None
    alternatives: tuple["FieldDescriptor", ...] = ()
    options: tuple[Option, ...] = ()
    format: str | None = None
    description: str | None = None
    nullable: bool = False
    discriminator: int | None = None
    default: Any = field(default=PydanticUndefined, compare=False, repr=False)
    source: "SchemaNode | None" = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.children, MappingProxyType):
            object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def effective_kind(self) -> str:
        """Kind used for rendering, honoring a caller's kind override."""
        return self.hints.kind or self.kind.value

    @property
    def label(self) -> str:
        """Display label for the field."""
        return self.hints.label or humanize(self.name)

    @property
    def has_default(self) -> bool:
        """Whether the schema declares a default value."""
        return self.default is not PydanticUndefined

    @property
    def effective_options(self) -> tuple[Option, ...]:
        """Choices for enum-like fields, caller hints first."""
        if self.hints.options is not None:
            return tuple(Option(hint.value, hint.label) for hint in self.hints.options)
        return self.options

    def at(
        self, path: str, name: str | None = None, hints: FieldOptions | None = None
    ) -> "FieldDescriptor":
        """Return a copy of this descriptor tree re-rooted at ``path``.

        Args:
            path: New canonical path for the root of the copy
            name: Optional new name for the root
            hints: Optional replacement hints for the root

        Returns:
            A new descriptor; the original is left untouched
        """
        rebased = self._rebased(self.path, path)
        updates: dict[str, Any] = {}
        if name is not None:
            updates["name"] = name
        if hints is not None:
            updates["hints"] = hints
        return replace(rebased, **updates) if updates else rebased

    def _rebased(self, old: str, new: str) -> "FieldDescriptor":
        return replace(
            self,
            path=new + self.path[len(old):],
            children={
                name: child._rebased(old, new) for name, child in self.children.items()
            },
            item=self.item._rebased(old, new) if self.item else None,
            alternatives=tuple(alt._rebased(old, new) for alt in self.alternatives),
        )

    def entry(self, key: PathSegment) -> "FieldDescriptor":
        """Concrete descriptor for an array index or record key."""
        if self.item is None:
            raise TypeError(f"Field '{self.path}' of kind {self.kind.value} has no entries")
        return self.item.at(entry_path(self.path, key), name=str(key))

    def walk(self) -> Iterator["FieldDescriptor"]:
        """Yield this descriptor and all nested descriptors depth-first."""
        yield self
        for child in self.children.values():
            yield from child.walk()
        for alternative in self.alternatives:
            yield from alternative.walk()
        if self.item is not None:
            yield from self.item.walk()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the descriptor tree for inspection and comparison."""
        data: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "kind": self.kind.value,
            "constraints": self.constraints.to_dict(),
        }
        hints = self.hints.model_dump(exclude_defaults=True, by_alias=True)
        if hints:
            data["hints"] = hints
        if self.format:
            data["format"] = self.format
        if self.nullable:
            data["nullable"] = True
        if self.options:
            data["options"] = [
                {"value": option.value, "label": option.label} for option in self.options
            ]
        if self.children:
            data["children"] = [child.to_dict() for child in self.children.values()]
        if self.item is not None:
            data["item"] = self.item.to_dict()
        if self.alternatives:
            data["alternatives"] = [alt.to_dict() for alt in self.alternatives]
        return data


def find_descriptor(
    descriptors: Mapping[str, FieldDescriptor], path: str
) -> FieldDescriptor | None:
    """Resolve a canonical path against top-level descriptors.

    Concrete array indexes and record keys resolve to re-rooted copies of the
    item template, so ``interests[2]`` yields a descriptor with that path.

    Args:
        descriptors: Top-level descriptors as returned by the mapper
        path: Canonical path to resolve

    Returns:
        The matching descriptor, or None when the path is unknown
    """
    for top in descriptors.values():
        if not is_within(path, top.path):
            continue
        current: FieldDescriptor | None = top
        for segment in parse_path(path[len(top.path):]):
            if current is None:
                break
            current = _step(current, segment)
        if current is not None:
            return current
    return None


def _step(descriptor: FieldDescriptor, segment: PathSegment) -> FieldDescriptor | None:
    if descriptor.kind is FieldKind.OBJECT:
        return descriptor.children.get(segment) if isinstance(segment, str) else None
    if descriptor.kind is FieldKind.ARRAY:
        if isinstance(segment, int) or segment == "*":
            return descriptor.entry(segment)
        return None
    if descriptor.kind is FieldKind.RECORD:
        return descriptor.entry(segment)
    if descriptor.kind is FieldKind.UNION:
        for alternative in descriptor.alternatives:
            found = _step(alternative, segment)
            if found is not None:
                return found
    return None
