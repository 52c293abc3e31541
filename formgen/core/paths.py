"""Canonical field path encoding.

Object members are joined with ``.``; array indexes and record keys are
wrapped in brackets (``address.street``, ``interests[2]``, ``meta[color]``).
Template entries of repeatable fields use the ``[*]`` placeholder. The same
encoding is used for descriptor paths, rendered input names and error keys.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

PathSegment = str | int

ITEM_PLACEHOLDER = "*"

# Suffix of the radio group choosing the active alternative of a union
ALTERNATIVE_SUFFIX = ":alt"

_SEGMENT_PATTERN = re.compile(r"([^.\[\]]+)|\[([^\]]*)\]")


class _Missing:
    """Sentinel for values absent from a submission or render context."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def member_path(parent: str, name: str) -> str:
    """Path of a named member of an object-shaped parent."""
    return f"{parent}.{name}" if parent else name


def entry_path(parent: str, key: PathSegment) -> str:
    """Path of an array item or record entry."""
    return f"{parent}[{key}]"


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Split a path into segments.

    Bracketed digits become integers, every other segment stays a string.
    Both ``address.street`` and ``address[street]`` yield
    ``("address", "street")``.
    """
    segments: list[PathSegment] = []
    for match in _SEGMENT_PATTERN.finditer(path):
        name, bracketed = match.groups()
        if name is not None:
            segments.append(name)
        elif bracketed.isdigit():
            segments.append(int(bracketed))
        else:
            segments.append(bracketed)
    return tuple(segments)


def join_segments(segments: Iterable[PathSegment]) -> str:
    """Join raw location segments without schema knowledge.

    Integers become bracketed indexes, strings become dotted members.
    """
    path = ""
    for segment in segments:
        if isinstance(segment, int):
            path = entry_path(path, segment)
        else:
            path = member_path(path, str(segment))
    return path


def is_within(path: str, ancestor: str) -> bool:
    """Check whether ``path`` equals ``ancestor`` or lies beneath it."""
    if path == ancestor:
        return True
    return path.startswith(f"{ancestor}.") or path.startswith(f"{ancestor}[")


def value_at(data: Any, path: str | Iterable[PathSegment]) -> Any:
    """Look up a nested value, returning ``MISSING`` when any segment is absent."""
    segments = parse_path(path) if isinstance(path, str) else tuple(path)
    current = data
    for segment in segments:
        if isinstance(current, Mapping):
            if segment in current:
                current = current[segment]
            elif str(segment) in current:
                current = current[str(segment)]
            else:
                return MISSING
        elif isinstance(current, list | tuple) and isinstance(segment, int):
            if segment >= len(current):
                return MISSING
            current = current[segment]
        else:
            return MISSING
    return current


def remove_path(data: Any, path: str) -> None:
    """Remove the value at ``path`` from a nested structure in place."""
    segments = parse_path(path)
    if not segments:
        return
    parent = value_at(data, segments[:-1]) if len(segments) > 1 else data
    last = segments[-1]
    if isinstance(parent, dict):
        parent.pop(last, None)
        if isinstance(last, int):
            parent.pop(str(last), None)
    elif isinstance(parent, list) and isinstance(last, int) and last < len(parent):
        parent[last] = None


def expand_flat_data(data: Mapping[Any, Any]) -> dict[Any, Any]:
    """Expand dot/bracket keys of a submission into nested dicts and lists.

    Nested values are expanded recursively, so flat and nested encodings can
    be mixed. Index-keyed levels are turned into lists ordered by index.
    """
    expanded: dict[Any, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = expand_flat_data(value)
        elif isinstance(value, list):
            value = [
                expand_flat_data(item) if isinstance(item, Mapping) else item
                for item in value
            ]
        segments = parse_path(key) if isinstance(key, str) else (key,)
        if not segments:
            continue
        _assign(expanded, segments, value)
    return _finalize(expanded)


def _assign(container: dict[Any, Any], segments: tuple[PathSegment, ...], value: Any) -> None:
    for segment in segments[:-1]:
        segment = _append_index(container, segment)
        existing = container.get(segment)
        if isinstance(existing, list):
            existing = dict(enumerate(existing))
        if not isinstance(existing, dict):
            existing = {}
        container[segment] = existing
        container = existing

    last = _append_index(container, segments[-1])
    current = container.get(last)
    if isinstance(current, dict) and isinstance(value, Mapping):
        current.update(value)
    else:
        container[last] = value


def _append_index(container: dict[Any, Any], segment: PathSegment) -> PathSegment:
    # ``tags[]`` appends to the list being built
    if segment == "":
        return sum(1 for key in container if isinstance(key, int))
    return segment


def _finalize(node: Any) -> Any:
    if isinstance(node, dict):
        finalized = {key: _finalize(value) for key, value in node.items()}
        if finalized and all(isinstance(key, int) for key in finalized):
            return [finalized[key] for key in sorted(finalized)]
        return finalized
    if isinstance(node, list):
        return [_finalize(item) for item in node]
    return node
