"""Validation bridge between form submissions and Pydantic schemas.

The bridge decodes a submission, drops fields hidden by conditional rules,
validates the rest against the schema and translates Pydantic error locations
into canonical field paths. Single values can be validated in isolation for
live feedback while a user edits the form.
"""

from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..behavior.rules import ConditionalRule, coerce_rules, hidden_targets
from ..core.cache import FormInstanceCache
from ..core.logging import OperationTimer, get_logger
from ..core.mapper import map_schema
from ..core.paths import (
    ALTERNATIVE_SUFFIX,
    MISSING,
    is_within,
    join_segments,
    member_path,
    remove_path,
)
from ..core.schema import FieldDescriptor, FieldKind, find_descriptor
from .errors import (
    FORM_ERROR_KEY,
    FieldValidationResult,
    ValidationFailure,
    ValidationResult,
)
from .submission import chosen_alternative, decode_submission, decode_value

logger = get_logger(__name__)


class ValidationBridge:
    """Validates submissions of one form against its schema."""

    def __init__(
        self,
        schema: Any,
        descriptors: Mapping[str, FieldDescriptor] | None = None,
        rules: Sequence[ConditionalRule] | Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            schema: Pydantic model class or dataclass the form was generated from
            descriptors: Descriptors of the form (mapped from the schema if omitted)
            rules: Conditional rules, parsed or as ``conditionalLogic`` configuration
        """
        self.schema = schema
        self.descriptors = descriptors if descriptors is not None else map_schema(schema)
        self.rules = coerce_rules(rules)
        self._adapter = TypeAdapter(schema)

    @classmethod
    def from_cache(cls, cache: FormInstanceCache, form_id: str) -> "ValidationBridge":
        """Bridge for a form instance stored in ``cache``.

        Raises:
            FormInstanceNotFound: If the instance is unknown or expired
        """
        entry = cache.get(form_id)
        return cls(entry.schema, entry.descriptors, entry.rules)

    def validate(self, submitted: Mapping[str, Any] | None) -> ValidationResult:
        """Validate a whole submission.

        Args:
            submitted: Flat or nested submitted data; it is not modified

        Returns:
            Result with errors keyed by canonical path, or the validated model
        """
        data, alternative_errors = self._prepare(submitted)
        try:
            model = self._validate_decoded(data, alternative_errors)
        except ValidationFailure as failure:
            logger.info(
                "Submission failed validation",
                schema=getattr(self.schema, "__name__", None),
                error_count=len(failure.errors_by_path),
            )
            return ValidationResult.from_failure(failure, data)
        return ValidationResult(valid=True, model=model, data=data)

    def validate_or_raise(self, submitted: Mapping[str, Any] | None) -> Any:
        """Validate a submission and return the model.

        Raises:
            ValidationFailure: If the submission does not satisfy the schema
        """
        return self._validate_decoded(*self._prepare(submitted))

    def decode(self, submitted: Mapping[str, Any] | None) -> dict[str, Any]:
        """Decode a submission and drop the fields hidden by conditional rules.

        Values of unions are coerced to the alternative the user picked.
        """
        return self._prepare(submitted)[0]

    def _prepare(
        self, submitted: Mapping[str, Any] | None
    ) -> tuple[dict[str, Any], dict[str, str]]:
        data = decode_submission(self.descriptors, submitted, keep_alternatives=True)
        for path in sorted(self.hidden_paths(data), key=len, reverse=True):
            remove_path(data, path)
        errors: dict[str, str] = {}
        _resolve_alternatives(self.descriptors, data, errors)
        return data, errors

    def hidden_paths(self, data: Mapping[str, Any]) -> set[str]:
        """Paths hidden by conditional rules for the decoded ``data``."""
        return hidden_targets(self.rules, data, self.descriptors)

    def validate_field(self, field_path: str, value: Any) -> FieldValidationResult:
        """Validate one value against the schema of a single field.

        Args:
            field_path: Canonical path of the field
            value: Raw submitted value

        Returns:
            Result with the first applicable error message, if any

        Raises:
            KeyError: If the path does not name a field of the form
        """
        descriptor = find_descriptor(self.descriptors, field_path)
        if descriptor is None or descriptor.source is None:
            raise KeyError(f"Unknown field path: {field_path}")

        decoded = decode_value(descriptor, value)
        if decoded is None and not descriptor.nullable:
            decoded = MISSING
        if decoded is MISSING:
            if not descriptor.constraints.required:
                return FieldValidationResult(path=field_path, valid=True, value=None)
            return FieldValidationResult(
                path=field_path,
                valid=False,
                message=_message(descriptor, {"type": "missing", "msg": "Field required"}),
            )

        try:
            validated = _adapter_for(descriptor.source.annotated()).validate_python(decoded)
        except PydanticValidationError as exc:
            errors = exc.errors()
            return FieldValidationResult(
                path=field_path, valid=False, message=_message(descriptor, errors[-1])
            )
        return FieldValidationResult(path=field_path, valid=True, value=validated)

    def _validate_decoded(
        self, data: dict[str, Any], alternative_errors: Mapping[str, str] | None = None
    ) -> Any:
        model = None
        with OperationTimer(logger, "validate", schema=getattr(self.schema, "__name__", None)):
            try:
                model = self._adapter.validate_python(data)
                errors: dict[str, str] = {}
            except PydanticValidationError as exc:
                errors = self.errors_by_path(exc)
        errors.update(alternative_errors or {})

        hidden = self.hidden_paths(data)
        errors = {
            path: message
            for path, message in errors.items()
            if not any(is_within(path, target) for target in hidden)
        }
        if errors:
            raise ValidationFailure(errors)
        # None when only fields hidden by rules failed
        return model

    def errors_by_path(self, exc: PydanticValidationError) -> dict[str, str]:
        """Translate Pydantic errors into messages keyed by canonical path.

        When several errors land on the same path, the last one wins.
        """
        errors: dict[str, str] = {}
        for error in exc.errors():
            path, descriptor = locate_error(self.descriptors, error["loc"])
            errors[path or FORM_ERROR_KEY] = _message(descriptor, error)
        return errors


def locate_error(
    descriptors: Mapping[str, FieldDescriptor], loc: Sequence[str | int]
) -> tuple[str, FieldDescriptor | None]:
    """Map a Pydantic error location to a canonical path and its descriptor.

    Locations inside a union stop at the union itself, since the alternative
    tags Pydantic inserts are not part of the submitted structure.
    """
    if not loc:
        return "", None

    head = loc[0]
    current = descriptors.get(head) if isinstance(head, str) else None
    if current is None:
        return join_segments(loc), None

    for segment in loc[1:]:
        if current.kind is FieldKind.OBJECT and isinstance(segment, str):
            child = current.children.get(segment)
            if child is None:
                return member_path(current.path, segment), None
            current = child
        elif current.kind is FieldKind.ARRAY and isinstance(segment, int):
            current = current.entry(segment)
        elif current.kind is FieldKind.RECORD and segment not in ("[key]", "[value]"):
            current = current.entry(segment)
        else:
            break
    return current.path, current


def _resolve_alternatives(
    members: Mapping[str, FieldDescriptor], data: dict[Any, Any], errors: dict[str, str]
) -> None:
    """Coerce union members of ``data`` to their chosen alternative in place.

    The alternative selectors are removed; failures of a chosen alternative
    are recorded under the path of its union.
    """
    selectors = {
        key[: -len(ALTERNATIVE_SUFFIX)]: data.pop(key)
        for key in [k for k in data if isinstance(k, str) and k.endswith(ALTERNATIVE_SUFFIX)]
    }
    for name, value in list(data.items()):
        descriptor = members.get(name) if isinstance(name, str) else None
        if descriptor is not None:
            data[name] = _resolve_value(descriptor, value, selectors.get(name), errors)


def _resolve_value(
    descriptor: FieldDescriptor, value: Any, selector: Any, errors: dict[str, str]
) -> Any:
    kind = descriptor.kind
    if kind is FieldKind.OBJECT and isinstance(value, dict):
        _resolve_alternatives(descriptor.children, value, errors)
    elif kind is FieldKind.ARRAY and isinstance(value, list) and descriptor.item:
        return [
            _resolve_value(descriptor.entry(index), item, None, errors)
            for index, item in enumerate(value)
        ]
    elif kind is FieldKind.RECORD and isinstance(value, dict) and descriptor.item:
        return {
            key: _resolve_value(descriptor.entry(key), item, None, errors)
            for key, item in value.items()
        }
    elif kind is FieldKind.UNION:
        chosen = chosen_alternative(descriptor, selector)
        if chosen is None or chosen.source is None:
            return value
        value = _resolve_value(chosen, value, None, errors)
        adapter = _adapter_for(chosen.source.annotated())
        try:
            return adapter.dump_python(adapter.validate_python(value), by_alias=True)
        except PydanticValidationError as exc:
            errors[descriptor.path] = _message(descriptor, exc.errors()[-1])
    return value


def _message(descriptor: FieldDescriptor | None, error: Mapping[str, Any]) -> str:
    error_type = error.get("type", "")
    if descriptor is not None and descriptor.source is not None:
        messages = descriptor.source.messages
        custom = messages.get(error_type) or messages.get("default")
        if custom:
            return custom

    context = error.get("ctx") or {}
    if error_type == "value_error" and "error" in context:
        return str(context["error"])
    return str(error.get("msg", "Invalid value"))


@lru_cache(maxsize=256)
def _cached_adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _adapter_for(annotation: Any) -> TypeAdapter:
    try:
        return _cached_adapter(annotation)
    except TypeError:
        # unhashable metadata
        return TypeAdapter(annotation)


def validate(
    schema: Any,
    submitted: Mapping[str, Any] | None,
    rules: Sequence[ConditionalRule] | Mapping[str, Any] | None = None,
) -> ValidationResult:
    """Validate a submission against ``schema``."""
    return ValidationBridge(schema, rules=rules).validate(submitted)


def validate_field(schema: Any, field_path: str, value: Any) -> FieldValidationResult:
    """Validate a single field value against ``schema``."""
    return ValidationBridge(schema).validate_field(field_path, value)
