"""Unit tests for schema introspection: kind precedence and constraints."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional
import uuid

from pydantic import AnyUrl, BaseModel, EmailStr, Field
import pytest

from formgen.core.introspector import (
    UUID_PATTERN,
    ConstraintIntrospector,
    SchemaNode,
    introspect,
)
from formgen.core.schema import FieldKind, SchemaIntrospectionError


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Node(BaseModel):
    """Self-referencing schema."""

    name: str
    children: list["Node"] = Field(default_factory=list)


Node.model_rebuild()


@dataclass
class Point:
    x: float
    y: float = 0.0
    tags: list[str] = field(default_factory=list)


class TestKindPrecedence:
    """Test that each annotation maps to the expected kind."""

    @pytest.mark.parametrize(
        "annotation,kind",
        [
            (str, FieldKind.TEXT),
            (EmailStr, FieldKind.EMAIL),
            (AnyUrl, FieldKind.URL),
            (int, FieldKind.NUMBER),
            (float, FieldKind.NUMBER),
            (Decimal, FieldKind.NUMBER),
            (bool, FieldKind.BOOLEAN),
            (date, FieldKind.DATE),
            (datetime, FieldKind.DATE),
            (Literal["a", "b"], FieldKind.ENUM),
            (Color, FieldKind.ENUM),
            (bytes, FieldKind.FILE),
            (list[int], FieldKind.ARRAY),
            (set[str], FieldKind.ARRAY),
            (dict[str, int], FieldKind.RECORD),
            (int | str, FieldKind.UNION),
            (Point, FieldKind.OBJECT),
        ],
    )
    def test_kind(self, annotation, kind):
        """Test the kind assigned to common annotations."""
        assert introspect(annotation).kind is kind

    def test_bool_is_not_a_number(self):
        """Test that bool wins over its int base class."""
        assert introspect(bool).kind is FieldKind.BOOLEAN

    def test_long_minimum_length_is_textarea(self):
        """Test that a minimum length of 100 selects a textarea."""
        result = introspect(Annotated[str, Field(min_length=100)])
        assert result.kind is FieldKind.TEXTAREA
        assert result.constraints.min_length == 100

    def test_short_minimum_length_stays_text(self):
        """Test that shorter minimum lengths stay plain text."""
        assert introspect(Annotated[str, Field(min_length=99)]).kind is FieldKind.TEXT

    def test_narrow_bounds_are_range(self):
        """Test that numbers with a span of at most 10 become a range."""
        result = introspect(Annotated[int, Field(ge=1, le=5)])
        assert result.kind is FieldKind.RANGE
        assert result.constraints.min == 1
        assert result.constraints.max == 5

    def test_wide_bounds_are_number(self):
        """Test that wide bounds keep the number kind."""
        assert introspect(Annotated[int, Field(ge=0, le=11)]).kind is FieldKind.NUMBER

    def test_single_bound_is_number(self):
        """Test that a single bound never selects a range."""
        assert introspect(Annotated[int, Field(ge=0)]).kind is FieldKind.NUMBER

    def test_uuid_is_text_with_pattern(self):
        """Test that UUIDs are text with a format and pattern."""
        result = introspect(uuid.UUID)
        assert result.kind is FieldKind.TEXT
        assert result.format == "uuid"
        assert result.constraints.pattern == UUID_PATTERN

    def test_date_formats(self):
        """Test the format recorded for temporal types."""
        assert introspect(date).format == "date"
        assert introspect(datetime).format == "date-time"
        assert introspect(time).format == "time"


class TestConstraints:
    """Test constraint extraction."""

    def test_text_constraints(self):
        """Test length and pattern constraints on strings."""
        result = introspect(
            Annotated[str, Field(min_length=2, max_length=8, pattern=r"^[a-z]+$")]
        )
        constraints = result.constraints
        assert constraints.min_length == 2
        assert constraints.max_length == 8
        assert constraints.pattern == r"^[a-z]+$"
        assert constraints.required is True

    def test_exclusive_integer_bounds_tighten(self):
        """Test that gt/lt on integers become inclusive bounds."""
        result = introspect(Annotated[int, Field(gt=0, lt=100)])
        assert result.constraints.min == 1
        assert result.constraints.max == 99
        assert result.constraints.integer is True
        assert result.constraints.exclusive_min is False

    def test_float_bounds_stay(self):
        """Test that float bounds are taken as declared and stay exclusive."""
        result = introspect(Annotated[float, Field(gt=0.5)])
        assert result.constraints.min == 0.5
        assert result.constraints.exclusive_min is True
        assert result.constraints.exclusive_max is False
        assert result.constraints.integer is False
        assert result.constraints.to_dict()["exclusiveMin"] is True

    def test_multiple_of_is_step(self):
        """Test that multiple_of becomes the step."""
        result = introspect(Annotated[float, Field(multiple_of=0.25)])
        assert result.constraints.step == 0.25

    def test_optional_is_not_required(self):
        """Test that Optional unwraps and marks the node nullable."""
        result = introspect(Optional[int])
        assert result.kind is FieldKind.NUMBER
        assert result.nullable is True
        assert result.constraints.required is False

    def test_array_length_constraints(self):
        """Test that list length bounds are kept on the array."""
        result = introspect(Annotated[list[str], Field(min_length=1, max_length=3)])
        assert result.constraints.min_length == 1
        assert result.constraints.max_length == 3
        assert result.item.kind is FieldKind.TEXT

    def test_node_with_default_is_not_required(self):
        """Test that the node's own required flag is honored."""
        result = introspect(SchemaNode(annotation=str, required=False))
        assert result.constraints.required is False


class TestOptions:
    """Test choices of enum-kind nodes."""

    def test_literal_options(self):
        """Test that literal values become capitalized options."""
        result = introspect(Literal["admin", "user"])
        assert [(o.value, o.label) for o in result.options] == [
            ("admin", "Admin"),
            ("user", "User"),
        ]

    def test_enum_options_use_member_values(self):
        """Test that enum options use member values."""
        result = introspect(Color)
        assert [o.value for o in result.options] == ["red", "green"]

    def test_non_string_literals_keep_raw_values(self):
        """Test that options render as text and remember the literal value."""
        result = introspect(Literal[1, True, 0.5])
        assert [(o.value, o.label, o.raw) for o in result.options] == [
            ("1", "1", 1),
            ("true", "True", True),
            ("0.5", "0.5", 0.5),
        ]


class TestStructure:
    """Test nested structures."""

    def test_model_children_in_declaration_order(self):
        """Test that object members keep declaration order."""
        result = ConstraintIntrospector().introspect_schema(Point)
        assert [name for name, _ in result.children] == ["x", "y", "tags"]

    def test_dataclass_defaults(self):
        """Test that dataclass defaults make members optional."""
        result = introspect(Point)
        children = dict(result.children)
        assert children["x"].constraints.required is True
        assert children["y"].constraints.required is False
        assert children["tags"].constraints.required is False

    def test_union_alternatives(self):
        """Test that union alternatives are introspected in order."""
        result = introspect(int | str)
        assert [alt.kind for alt in result.alternatives] == [
            FieldKind.NUMBER,
            FieldKind.TEXT,
        ]

    def test_optional_union_stays_union(self):
        """Test that removing None from a wider union keeps the union."""
        result = introspect(int | str | None)
        assert result.kind is FieldKind.UNION
        assert result.nullable is True
        assert len(result.alternatives) == 2

    def test_recursive_schema_is_cut(self):
        """Test that self references render as an empty object."""
        result = introspect(Node)
        children = dict(result.children)
        item = children["children"].item
        assert item.kind is FieldKind.OBJECT
        assert item.children == ()

    def test_record_value_type(self):
        """Test that records introspect their value type."""
        result = introspect(dict[str, int])
        assert result.item.kind is FieldKind.NUMBER


class TestErrors:
    """Test introspection failures."""

    def test_top_level_must_be_object(self):
        """Test that scalar schemas are rejected at the top level."""
        with pytest.raises(SchemaIntrospectionError):
            ConstraintIntrospector().introspect_schema(str)

    def test_undiscoverable_node(self):
        """Test that a value instead of a type is rejected."""
        with pytest.raises(SchemaIntrospectionError) as exc_info:
            introspect(42)
        assert exc_info.value.node is not None

    def test_forward_reference(self):
        """Test that unresolved forward references are rejected."""
        with pytest.raises(SchemaIntrospectionError, match="forward reference"):
            introspect("Missing")
