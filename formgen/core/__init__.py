"""Core functionality: descriptors, schema introspection and mapping."""

from .introspector import ConstraintIntrospector, Introspection, SchemaNode, introspect
from .logging import (
    OperationTimer,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from .mapper import DescriptorMapper, map_schema
from .paths import (
    ALTERNATIVE_SUFFIX,
    ITEM_PLACEHOLDER,
    MISSING,
    entry_path,
    expand_flat_data,
    member_path,
    parse_path,
)
from .schema import (
    Constraints,
    FieldDescriptor,
    FieldKind,
    MissingControllingField,
    Option,
    SchemaIntrospectionError,
    UnsupportedFieldKind,
    find_descriptor,
)

# Imported last, the cache depends on the behavior package which needs the above
from .cache import CachedForm, FormInstanceCache, FormInstanceNotFound  # noqa: E402

__all__ = [
    "ALTERNATIVE_SUFFIX",
    "ITEM_PLACEHOLDER",
    "MISSING",
    # Descriptors
    "CachedForm",
    "ConstraintIntrospector",
    "Constraints",
    "DescriptorMapper",
    "FieldDescriptor",
    "FieldKind",
    "FormInstanceCache",
    "FormInstanceNotFound",
    "Introspection",
    "MissingControllingField",
    "OperationTimer",
    "Option",
    "SchemaIntrospectionError",
    "SchemaNode",
    "UnsupportedFieldKind",
    "bind_context",
    "clear_context",
    # Logging
    "configure_logging",
    "entry_path",
    "expand_flat_data",
    "find_descriptor",
    "get_logger",
    "introspect",
    "map_schema",
    "member_path",
    "parse_path",
]
