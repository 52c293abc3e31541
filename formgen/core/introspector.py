"""Schema introspection for Pydantic models and dataclasses.

The introspector answers two questions for every schema node: which
structural kind it is and which constraints it declares. Wrappers that do not
change the kind (``Optional``, ``Annotated``, ``NewType``, type aliases) are
unwrapped; optionality is recorded as ``required=False`` on the constraints.
"""

from collections.abc import Mapping as AbcMapping
from collections.abc import MutableMapping, MutableSequence, MutableSet, Sequence
from collections.abc import Set as AbcSet
import dataclasses
import datetime as dt
import decimal
import enum
import io
import types
import typing
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union, get_args, get_origin
import uuid

import annotated_types as at
from pydantic import AnyUrl, BaseModel, EmailStr, NameEmail, SecretStr
from pydantic.fields import FieldInfo
from pydantic.networks import UrlConstraints
from pydantic_core import PydanticUndefined, Url

from .logging import get_logger
from .schema import Constraints, FieldKind, Option, SchemaIntrospectionError

logger = get_logger(__name__)

UUID_PATTERN = (
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

# Upload objects of common web frameworks, matched by class name
FILE_CLASS_NAMES = frozenset({"UploadFile", "UploadedFile", "FileStorage", "File"})

TEXTAREA_MIN_LENGTH = 100
RANGE_MAX_SPAN = 10

_ARRAY_ORIGINS = (list, set, frozenset, tuple, Sequence, MutableSequence, AbcSet, MutableSet)
_RECORD_ORIGINS = (dict, AbcMapping, MutableMapping)
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_TYPE_ALIAS_TYPE = getattr(typing, "TypeAliasType", None)


@dataclass(frozen=True)
class SchemaNode:
    """A schema node: an annotation plus the constraint metadata attached to it."""

    annotation: Any
    metadata: tuple[Any, ...] = ()
    required: bool = True
    default: Any = PydanticUndefined
    title: str | None = None
    description: str | None = None
    messages: AbcMapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_field(cls, info: FieldInfo) -> "SchemaNode":
        """Build a node from a Pydantic field definition.

        Custom error messages are read from ``json_schema_extra={"messages": ...}``,
        keyed by Pydantic error type with an optional ``"default"`` entry.
        """
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        messages = extra.get("messages") or {}
        return cls(
            annotation=info.annotation,
            metadata=tuple(info.metadata),
            required=info.is_required(),
            default=info.default,
            title=info.title,
            description=info.description,
            messages=MappingProxyType(dict(messages)),
        )

    def annotated(self) -> Any:
        """The annotation with its metadata re-attached, ready for a TypeAdapter."""
        if self.metadata:
            return Annotated[(self.annotation, *self.metadata)]
        return self.annotation


@dataclass(frozen=True)
class Introspection:
    """Result of classifying one schema node."""

    kind: FieldKind
    constraints: Constraints
    node: SchemaNode
    children: tuple[tuple[str, "Introspection"], ...] = ()
    item: "Introspection | None" = None
    alternatives: tuple["Introspection", ...] = ()
    options: tuple[Option, ...] = ()
    format: str | None = None
    nullable: bool = False


class ConstraintIntrospector:
    """Classifies schema nodes into field kinds and extracts their constraints.

    Kinds are decided in a fixed precedence order, first match wins:
    literal/enum choices, booleans, email, URL, UUID, strings (textarea when
    the minimum length is at least 100), numbers (range when both bounds are
    within 10 of each other), dates, files, nested objects, arrays, records,
    unions and finally a plain text fallback.
    """

    def introspect(self, node: SchemaNode | Any) -> Introspection:
        """Classify a schema node.

        Args:
            node: A SchemaNode or a bare annotation

        Returns:
            The introspection tree rooted at the node

        Raises:
            SchemaIntrospectionError: If the node has no discoverable type
        """
        if not isinstance(node, SchemaNode):
            node = SchemaNode(annotation=node)
        return self._introspect(node, ())

    def introspect_schema(self, schema: Any) -> Introspection:
        """Classify a top-level schema, which must be object-shaped."""
        result = self.introspect(schema)
        if result.kind is not FieldKind.OBJECT:
            raise SchemaIntrospectionError(
                f"Top-level schema must be a model or dataclass, got {result.kind.value}",
                node=schema,
            )
        return result

    def _introspect(self, node: SchemaNode, stack: tuple[type, ...]) -> Introspection:
        annotation, metadata, nullable = _unwrap(node.annotation, node.metadata)
        required = node.required and not nullable
        _check_discoverable(annotation, node)

        constraints = _collect_constraints(metadata)
        origin = get_origin(annotation)
        args = get_args(annotation)

        def result(kind: FieldKind, **kwargs: Any) -> Introspection:
            return Introspection(
                kind=kind,
                node=node,
                nullable=nullable,
                constraints=kwargs.pop("constraints", Constraints(required=required)),
                **kwargs,
            )

        if origin is Literal:
            return result(
                FieldKind.ENUM, options=tuple(_option(value) for value in args)
            )
        if _is_subclass(annotation, enum.Enum):
            return result(
                FieldKind.ENUM,
                options=tuple(_option(member.value) for member in annotation),
            )
        if annotation is bool:
            return result(FieldKind.BOOLEAN)
        if annotation in (EmailStr, NameEmail):
            return result(FieldKind.EMAIL, constraints=_text_constraints(required, constraints))
        if _is_url(annotation, metadata):
            return result(FieldKind.URL, constraints=_text_constraints(required, constraints))
        if annotation is uuid.UUID:
            return result(
                FieldKind.TEXT,
                format="uuid",
                constraints=Constraints(required=required, pattern=UUID_PATTERN),
            )
        if _is_subclass(annotation, str) or annotation is SecretStr:
            text = _text_constraints(required, constraints)
            kind = FieldKind.TEXT
            if text.min_length is not None and text.min_length >= TEXTAREA_MIN_LENGTH:
                kind = FieldKind.TEXTAREA
            return result(kind, constraints=text)
        if _is_subclass(annotation, int | float | decimal.Decimal):
            numeric = _numeric_constraints(
                required, constraints, integer=_is_subclass(annotation, int)
            )
            kind = FieldKind.NUMBER
            if (
                numeric.min is not None
                and numeric.max is not None
                and numeric.max - numeric.min <= RANGE_MAX_SPAN
            ):
                kind = FieldKind.RANGE
            return result(kind, constraints=numeric)
        if _is_subclass(annotation, dt.datetime):
            return result(FieldKind.DATE, format="date-time", constraints=_bounds(required, constraints))
        if _is_subclass(annotation, dt.date):
            return result(FieldKind.DATE, format="date", constraints=_bounds(required, constraints))
        if _is_subclass(annotation, dt.time):
            return result(FieldKind.DATE, format="time", constraints=_bounds(required, constraints))
        if _is_file(annotation):
            return result(FieldKind.FILE)
        if _is_object(annotation):
            return result(
                FieldKind.OBJECT, children=self._members(annotation, node, stack)
            )
        if origin in _ARRAY_ORIGINS or annotation in _ARRAY_ORIGINS:
            return result(
                FieldKind.ARRAY,
                item=self._introspect(SchemaNode(annotation=_item_type(annotation)), stack),
                constraints=Constraints(
                    required=required,
                    min_length=constraints.get("min_length"),
                    max_length=constraints.get("max_length"),
                ),
            )
        if origin in _RECORD_ORIGINS or annotation in _RECORD_ORIGINS:
            value_type = args[1] if len(args) == 2 else Any
            return result(
                FieldKind.RECORD,
                item=self._introspect(SchemaNode(annotation=value_type), stack),
                constraints=Constraints(
                    required=required,
                    min_length=constraints.get("min_length"),
                    max_length=constraints.get("max_length"),
                ),
            )
        if origin in _UNION_ORIGINS:
            return result(
                FieldKind.UNION,
                alternatives=tuple(
                    self._introspect(_alternative_node(arg), stack) for arg in args
                ),
            )

        logger.debug(
            "No specific kind for annotation, falling back to text",
            annotation=repr(annotation),
        )
        return result(FieldKind.TEXT, constraints=_text_constraints(required, constraints))

    def _members(
        self, model: type, node: SchemaNode, stack: tuple[type, ...]
    ) -> tuple[tuple[str, Introspection], ...]:
        if model in stack:
            logger.warning(
                "Recursive schema reference, rendering as empty object",
                model=model.__name__,
            )
            return ()

        stack = (*stack, model)
        return tuple(
            (name, self._introspect(member, stack))
            for name, member in _model_members(model)
        )


def _unwrap(annotation: Any, metadata: tuple[Any, ...]) -> tuple[Any, tuple[Any, ...], bool]:
    """Strip wrappers that do not change the structural kind."""
    nullable = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            args = get_args(annotation)
            annotation = args[0]
            metadata = (*metadata, *args[1:])
        elif origin in _UNION_ORIGINS:
            args = get_args(annotation)
            members = tuple(arg for arg in args if arg is not type(None))
            if len(members) == len(args):
                break
            nullable = True
            if len(members) == 1:
                annotation = members[0]
            else:
                annotation = Union[members]
                break
        elif isinstance(annotation, typing.NewType):
            annotation = annotation.__supertype__
        elif _TYPE_ALIAS_TYPE is not None and isinstance(annotation, _TYPE_ALIAS_TYPE):
            annotation = annotation.__value__
        else:
            break
    return annotation, metadata, nullable


def _check_discoverable(annotation: Any, node: SchemaNode) -> None:
    if annotation is Any or isinstance(annotation, type | typing.TypeVar):
        return
    if get_origin(annotation) is not None:
        return
    if isinstance(annotation, str | typing.ForwardRef):
        raise SchemaIntrospectionError(
            f"Unresolved forward reference {annotation!r}; rebuild the model first",
            node=node,
        )
    raise SchemaIntrospectionError(
        f"Schema node {annotation!r} has no discoverable type", node=node
    )


def _flatten(metadata: tuple[Any, ...] | list[Any]) -> typing.Iterator[Any]:
    for item in metadata:
        if isinstance(item, FieldInfo):
            yield from _flatten(item.metadata)
        elif isinstance(item, at.GroupedMetadata):
            yield from _flatten(list(item))
        else:
            yield item


def _collect_constraints(metadata: tuple[Any, ...]) -> dict[str, Any]:
    """Read annotated-types style constraint markers into a flat dict."""
    collected: dict[str, Any] = {}
    for item in _flatten(metadata):
        if isinstance(item, at.MinLen):
            collected["min_length"] = item.min_length
        elif isinstance(item, at.MaxLen):
            collected["max_length"] = item.max_length
        elif isinstance(item, at.Ge):
            collected["min"] = item.ge
        elif isinstance(item, at.Gt):
            collected["min"] = item.gt
            collected["min_exclusive"] = True
        elif isinstance(item, at.Le):
            collected["max"] = item.le
        elif isinstance(item, at.Lt):
            collected["max"] = item.lt
            collected["max_exclusive"] = True
        elif isinstance(item, at.MultipleOf):
            collected["step"] = item.multiple_of

        pattern = getattr(item, "pattern", None)
        if pattern is not None:
            collected["pattern"] = getattr(pattern, "pattern", pattern)
    return collected


def _text_constraints(required: bool, collected: dict[str, Any]) -> Constraints:
    return Constraints(
        required=required,
        min_length=collected.get("min_length"),
        max_length=collected.get("max_length"),
        pattern=collected.get("pattern"),
    )


def _bounds(required: bool, collected: dict[str, Any]) -> Constraints:
    return Constraints(
        required=required, min=collected.get("min"), max=collected.get("max")
    )


def _numeric_constraints(
    required: bool, collected: dict[str, Any], integer: bool
) -> Constraints:
    minimum = collected.get("min")
    maximum = collected.get("max")
    exclusive_min = bool(collected.get("min_exclusive")) and minimum is not None
    exclusive_max = bool(collected.get("max_exclusive")) and maximum is not None
    # Exclusive integer bounds tighten to the nearest allowed value
    if integer and exclusive_min:
        minimum += 1
        exclusive_min = False
    if integer and exclusive_max:
        maximum -= 1
        exclusive_max = False
    return Constraints(
        required=required,
        min=minimum,
        max=maximum,
        step=collected.get("step"),
        integer=integer,
        exclusive_min=exclusive_min,
        exclusive_max=exclusive_max,
    )


def _option(value: Any) -> Option:
    plain = value.value if isinstance(value, enum.Enum) else value
    # Same text as a selected value gets when it is rendered
    text = ("true" if plain else "false") if isinstance(plain, bool) else str(plain)
    return Option(value=text, label=text[:1].upper() + text[1:], raw=value)


def _is_subclass(annotation: Any, parent: Any) -> bool:
    if get_origin(annotation) is not None:
        return False
    return isinstance(annotation, type) and issubclass(annotation, parent)


def _is_url(annotation: Any, metadata: tuple[Any, ...]) -> bool:
    if _is_subclass(annotation, AnyUrl | Url):
        return True
    return any(isinstance(item, UrlConstraints) for item in metadata)


def _is_file(annotation: Any) -> bool:
    if annotation in (bytes, bytearray):
        return True
    if _is_subclass(annotation, io.IOBase):
        return True
    return isinstance(annotation, type) and annotation.__name__ in FILE_CLASS_NAMES


def _is_object(annotation: Any) -> bool:
    if _is_subclass(annotation, BaseModel):
        return True
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)


def _model_members(model: type) -> list[tuple[str, SchemaNode]]:
    """Declared members of a model or dataclass in declaration order."""
    if _is_subclass(model, BaseModel):
        return [
            (name, SchemaNode.from_field(info))
            for name, info in model.model_fields.items()
        ]

    pydantic_fields = getattr(model, "__pydantic_fields__", None)
    if pydantic_fields:
        return [
            (name, SchemaNode.from_field(info)) for name, info in pydantic_fields.items()
        ]

    hints = typing.get_type_hints(model, include_extras=True)
    members = []
    for member in dataclasses.fields(model):
        has_default = member.default is not dataclasses.MISSING
        has_factory = member.default_factory is not dataclasses.MISSING
        members.append(
            (
                member.name,
                SchemaNode(
                    annotation=hints.get(member.name, member.type),
                    required=not (has_default or has_factory),
                    default=member.default if has_default else PydanticUndefined,
                ),
            )
        )
    return members


def _item_type(annotation: Any) -> Any:
    args = get_args(annotation)
    if not args:
        return Any
    if get_origin(annotation) is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return args[0] if len(set(args)) == 1 else Any
    return args[0]


def _alternative_node(annotation: Any) -> SchemaNode:
    title = annotation.__name__ if _is_object(annotation) else None
    return SchemaNode(annotation=annotation, title=title)


def introspect(node: SchemaNode | Any) -> Introspection:
    """Classify a schema node with a default introspector."""
    return ConstraintIntrospector().introspect(node)
