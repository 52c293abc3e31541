"""Decoding of raw form submissions into schema-shaped data.

Browsers submit flat string key/value pairs. Decoding expands dot/bracket
keys, turns checkbox presence into booleans, record key/value rows into
mappings and empty strings into missing (or null) values, so that the
resulting data can be handed to the schema unchanged.
"""

from collections.abc import Mapping
from typing import Any

from ..core.paths import ALTERNATIVE_SUFFIX, MISSING, expand_flat_data
from ..core.schema import FieldDescriptor, FieldKind

TRUTHY_VALUES = frozenset({"true", "on", "1", "yes"})

# Hidden input carrying the id of a cached form instance
FORM_ID_FIELD = "_form_id"


def decode_submission(
    descriptors: Mapping[str, FieldDescriptor],
    data: Mapping[str, Any] | None,
    keep_alternatives: bool = False,
) -> dict[str, Any]:
    """Decode a submission against the top-level descriptors of a form.

    Args:
        descriptors: Top-level descriptors keyed by field name
        data: Flat or nested submitted data; it is not modified
        keep_alternatives: Keep the union alternative selectors, which are
            needed when re-rendering but never validated

    Returns:
        A new nested dict ready for schema validation
    """
    expanded = expand_flat_data(data) if data else {}
    expanded.pop(FORM_ID_FIELD, None)
    return _decode_members(descriptors, expanded, keep_alternatives)


def decode_value(
    descriptor: FieldDescriptor,
    value: Any,
    keep_alternatives: bool = False,
    alternative: Any = None,
) -> Any:
    """Decode one submitted value; returns ``MISSING`` when it should be omitted."""
    kind = descriptor.kind
    if kind is FieldKind.BOOLEAN:
        if value is None or value is MISSING:
            return False
        if isinstance(value, list) and value:
            value = value[-1]
        if isinstance(value, str):
            return value.strip().lower() in TRUTHY_VALUES
        return value

    if value is MISSING:
        return MISSING
    if isinstance(value, str) and value == "":
        return None if descriptor.nullable else MISSING

    if kind is FieldKind.ENUM and isinstance(value, str):
        return _option_value(descriptor, value)
    if kind is FieldKind.OBJECT and isinstance(value, Mapping):
        return _decode_members(descriptor.children, value, keep_alternatives)
    if kind is FieldKind.ARRAY and isinstance(value, list) and descriptor.item:
        items = (decode_value(descriptor.item, item, keep_alternatives) for item in value)
        return [item for item in items if item is not MISSING]
    if kind is FieldKind.RECORD and descriptor.item:
        return _decode_record(descriptor.item, value, keep_alternatives)
    if kind is FieldKind.UNION:
        chosen = chosen_alternative(descriptor, alternative)
        if chosen is not None:
            return decode_value(chosen, value, keep_alternatives)
    return value


def _decode_members(
    members: Mapping[str, FieldDescriptor],
    data: Mapping[Any, Any],
    keep_alternatives: bool,
) -> dict[Any, Any]:
    decoded: dict[Any, Any] = {}
    for key, value in data.items():
        if isinstance(key, str) and key.endswith(ALTERNATIVE_SUFFIX):
            if keep_alternatives:
                decoded[key] = value
            continue

        descriptor = members.get(key) if isinstance(key, str) else None
        if descriptor is None:
            decoded[key] = value
            continue

        result = decode_value(
            descriptor,
            value,
            keep_alternatives,
            alternative=data.get(f"{key}{ALTERNATIVE_SUFFIX}"),
        )
        if result is not MISSING:
            decoded[key] = result

    # Unchecked checkboxes are not submitted at all
    for name, descriptor in members.items():
        if name not in data and descriptor.kind is FieldKind.BOOLEAN:
            decoded[name] = False
    return decoded


def _decode_record(item: FieldDescriptor, value: Any, keep_alternatives: bool) -> Any:
    if isinstance(value, list) and all(
        isinstance(row, Mapping) and "key" in row for row in value
    ):
        record = {}
        for row in value:
            key = row.get("key")
            if key is None or key == "":
                continue
            decoded = decode_value(item, row.get("value", MISSING), keep_alternatives)
            if decoded is not MISSING:
                record[key] = decoded
        return record
    if isinstance(value, Mapping):
        record = {}
        for key, entry in value.items():
            decoded = decode_value(item, entry, keep_alternatives)
            if decoded is not MISSING:
                record[key] = decoded
        return record
    return value


def chosen_alternative(
    descriptor: FieldDescriptor, alternative: Any
) -> FieldDescriptor | None:
    """Alternative of a union picked by its discriminator value, if valid."""
    if alternative is None or alternative is MISSING:
        return None
    try:
        index = int(alternative)
    except (TypeError, ValueError):
        return None
    if 0 <= index < len(descriptor.alternatives):
        return descriptor.alternatives[index]
    return None


def _option_value(descriptor: FieldDescriptor, value: str) -> Any:
    # Option values are rendered as text; hand the schema its own value back
    for option in descriptor.options:
        if option.value == value and option.raw is not None:
            return option.raw
    return value
