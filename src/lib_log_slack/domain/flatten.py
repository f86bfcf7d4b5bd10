"""Flatten nested bindings into dotted-path string fields.

Nested mappings and lists expand into ``parent.child`` keys and every leaf is
coerced to a string. The walk uses an explicit stack so adversarial input
(deep nesting, reference cycles) cannot exhaust the interpreter stack.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

DEFAULT_MAX_DEPTH = 20

CIRCULAR_MARKER = "[Circular]"
MAPPING_MARKER = "[Object]"
SEQUENCE_MARKER = "[Array]"


def _is_composite(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _entries(value: Mapping[Any, Any] | list[Any] | tuple[Any, ...]) -> Iterator[tuple[Any, Any, bool]]:
    """Yield ``(key, child, excludable)`` triples; list indices are never excluded."""
    if isinstance(value, Mapping):
        for key, child in value.items():
            yield key, child, True
    else:
        for index, child in enumerate(value):
            yield index, child, False


def stringify(value: Any) -> str:
    """Return the string form of a leaf value.

    Examples
    --------
    >>> [stringify(v) for v in (None, True, 3, 1.0, 2.5, "x")]
    ['null', 'true', '3', '1', '2.5', 'x']
    """

    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def flatten_bindings(
    bindings: Mapping[str, Any],
    *,
    excluded_keys: Iterable[str] = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, str]:
    """Return ``bindings`` flattened into ``{"a.b": "value"}`` form.

    Parameters
    ----------
    bindings:
        Mapping to flatten; key order is preserved in the output.
    excluded_keys:
        Mapping keys dropped at any nesting level, including their subtrees.
    max_depth:
        Longest path expanded; a composite found at that depth is rendered as
        ``[Object]``/``[Array]`` instead of being walked.

    Examples
    --------
    >>> flatten_bindings({"user": {"id": 7, "tags": ["a", "b"]}, "pid": 1}, excluded_keys={"pid"})
    {'user.id': '7', 'user.tags.0': 'a', 'user.tags.1': 'b'}
    >>> flatten_bindings({"a": {"b": {"c": 1}}}, max_depth=2)
    {'a.b': '[Object]'}
    """

    excluded = frozenset(excluded_keys)
    flat: dict[str, str] = {}
    stack: list[tuple[Iterator[tuple[Any, Any, bool]], tuple[str, ...]]] = [(_entries(bindings), ())]
    on_path: list[int] = [id(bindings)]

    while stack:
        entries, path = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            on_path.pop()
            continue
        key, value, excludable = entry
        if excludable and key in excluded:
            continue
        child_path = path + (str(key),)
        if not _is_composite(value):
            flat[".".join(child_path)] = stringify(value)
            continue
        if id(value) in on_path:
            flat[".".join(child_path)] = CIRCULAR_MARKER
            continue
        if len(child_path) >= max_depth:
            marker = MAPPING_MARKER if isinstance(value, Mapping) else SEQUENCE_MARKER
            flat[".".join(child_path)] = marker
            continue
        stack.append((_entries(value), child_path))
        on_path.append(id(value))

    return flat


__all__ = [
    "CIRCULAR_MARKER",
    "DEFAULT_MAX_DEPTH",
    "MAPPING_MARKER",
    "SEQUENCE_MARKER",
    "flatten_bindings",
    "stringify",
]
