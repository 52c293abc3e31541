"""Descriptor mapper: turns a schema into a tree of field descriptors.

The mapper walks every declared property of an object-shaped schema, asks the
introspector for kind and constraints and merges presentation hints from the
schema itself (title, description) with caller-supplied field options keyed by
canonical path.
"""

from collections.abc import Mapping
from typing import Any

from ..config import FieldOptions
from .introspector import ConstraintIntrospector, Introspection
from .logging import OperationTimer, get_logger
from .paths import ITEM_PLACEHOLDER, entry_path, member_path
from .schema import FieldDescriptor, FieldKind

logger = get_logger(__name__)


class DescriptorMapper:
    """Maps schemas to field descriptors.

    The mapper holds no per-schema state, so the same instance can map any
    number of schemas and repeated calls produce equal results.
    """

    def __init__(self, introspector: ConstraintIntrospector | None = None) -> None:
        """Initialize the mapper.

        Args:
            introspector: Introspector to classify schema nodes with
        """
        self.introspector = introspector or ConstraintIntrospector()

    def map_schema(
        self,
        schema: Any,
        base_path: str = "",
        field_options: Mapping[str, FieldOptions | Mapping[str, Any]] | None = None,
    ) -> dict[str, FieldDescriptor]:
        """Produce one descriptor per declared property of ``schema``.

        Args:
            schema: Pydantic model class or dataclass
            base_path: Path prefix for every produced descriptor
            field_options: Presentation hints keyed by canonical path

        Returns:
            Top-level descriptors keyed by property name, in declaration order

        Raises:
            SchemaIntrospectionError: If the schema or any nested node cannot
                be classified
        """
        name = getattr(schema, "__name__", repr(schema))
        with OperationTimer(logger, "map_schema", schema=name):
            root = self.introspector.introspect_schema(schema)
            options = _normalize_options(field_options)
            descriptors = {
                child_name: self._build(
                    child_name, member_path(base_path, child_name), child, options
                )
                for child_name, child in root.children
            }

        unknown = set(options) - {
            descriptor.path
            for top in descriptors.values()
            for descriptor in top.walk()
        }
        if unknown:
            logger.debug(
                "Field options reference unknown paths", paths=sorted(unknown)
            )
        return descriptors

    def _build(
        self,
        name: str,
        path: str,
        introspection: Introspection,
        options: dict[str, FieldOptions],
        discriminator: int | None = None,
    ) -> FieldDescriptor:
        node = introspection.node
        hints = FieldOptions(label=node.title, description=node.description)
        # Union alternatives share their parent's path but not its hints
        if discriminator is None and path in options:
            hints = hints.merged(options[path])

        children = {}
        item = None
        alternatives: tuple[FieldDescriptor, ...] = ()
        if introspection.kind is FieldKind.OBJECT:
            children = {
                child_name: self._build(
                    child_name, member_path(path, child_name), child, options
                )
                for child_name, child in introspection.children
            }
        elif introspection.item is not None:
            item = self._build(
                ITEM_PLACEHOLDER,
                entry_path(path, ITEM_PLACEHOLDER),
                introspection.item,
                options,
            )
        elif introspection.kind is FieldKind.UNION:
            alternatives = tuple(
                self._build(name, path, alternative, options, discriminator=index)
                for index, alternative in enumerate(introspection.alternatives)
            )

        return FieldDescriptor(
            name=name,
            path=path,
            kind=introspection.kind,
            constraints=introspection.constraints,
            hints=hints,
            children=children,
            item=item,
            alternatives=alternatives,
            options=introspection.options,
            format=introspection.format,
            description=node.description,
            nullable=introspection.nullable,
            discriminator=discriminator,
            default=node.default,
            source=node,
        )


def _normalize_options(
    field_options: Mapping[str, FieldOptions | Mapping[str, Any]] | None,
) -> dict[str, FieldOptions]:
    normalized = {}
    for path, hints in (field_options or {}).items():
        normalized[path] = (
            hints if isinstance(hints, FieldOptions) else FieldOptions.model_validate(hints)
        )
    return normalized


def map_schema(
    schema: Any,
    base_path: str = "",
    field_options: Mapping[str, FieldOptions | Mapping[str, Any]] | None = None,
) -> dict[str, FieldDescriptor]:
    """Map a schema with a default mapper."""
    return DescriptorMapper().map_schema(schema, base_path, field_options)
