"""
Path addressing for nested form records.

Form records are plain JSON-like trees (dicts, lists, strings, numbers,
booleans, None). Every leaf can be addressed with a string path such as
``businessProfile.location.city`` or ``marketSituation.seasonality[0].factors[1]``.

All path building and path parsing lives here so that the language detector
(which emits paths) and the translation service (which writes translated
values back) always agree on the syntax.

Example:
    >>> record = {"a": {"b": ["x", "y"]}}
    >>> list(iter_string_leaves(record))
    [('a.b[0]', 'x'), ('a.b[1]', 'y')]
    >>> set_path(record, "a.b[1]", "z")
    >>> get_path(record, "a.b[1]")
    'z'
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Union

JSONValue = Union[str, int, float, bool, None, list, dict]

_SEGMENT_SPLIT = re.compile(r"[.\[\]]+")


def join_key(parent: str, key: str) -> str:
    """Address a mapping member below ``parent``."""
    return f"{parent}.{key}" if parent else str(key)


def join_index(parent: str, index: int) -> str:
    """Address a list element below ``parent``."""
    return f"{parent}[{index}]"


def split_path(path: str) -> list[str]:
    """Split a path on ``.``, ``[`` and ``]`` delimiters.

    >>> split_path("a.b[0].c")
    ['a', 'b', '0', 'c']
    """
    return [segment for segment in _SEGMENT_SPLIT.split(path) if segment]


def _is_index(segment: str) -> bool:
    return segment.isdigit()


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Read the value at ``path``, or ``default`` if any segment is missing."""
    current = data
    for segment in split_path(path):
        if isinstance(current, list) and _is_index(segment):
            index = int(segment)
            if index >= len(current):
                return default
            current = current[index]
        elif isinstance(current, dict) and segment in current:
            current = current[segment]
        else:
            return default
    return current


def set_path(data: dict | list, path: str, value: Any) -> None:
    """Write ``value`` at ``path`` in place.

    Missing intermediate containers are created lazily: a list when the
    following segment is numeric, a dict otherwise. Lists are padded with
    ``None`` up to the requested index.

    Raises:
        ValueError: If ``path`` is empty.
        TypeError: If an existing intermediate value is not a container.
    """
    segments = split_path(path)
    if not segments:
        raise ValueError("Cannot set a value at an empty path")

    current: Any = data
    for segment, next_segment in zip(segments, segments[1:]):
        child = _child(current, segment)
        if child is None:
            child = [] if _is_index(next_segment) else {}
            _assign(current, segment, child)
        current = child

    _assign(current, segments[-1], value)


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, list):
        index = int(segment)
        return container[index] if index < len(container) else None
    if isinstance(container, dict):
        return container.get(segment)
    raise TypeError(f"Cannot descend into {type(container).__name__} at '{segment}'")


def _assign(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, list):
        index = int(segment)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    elif isinstance(container, dict):
        container[segment] = value
    else:
        raise TypeError(f"Cannot assign into {type(container).__name__} at '{segment}'")


def iter_string_leaves(data: Any, path: str = "") -> Iterator[tuple[str, str]]:
    """Yield ``(path, text)`` for every non-blank string leaf.

    Dicts are walked in insertion order and lists by index; lists nested
    directly inside lists are addressed as ``a[0][1]``. Non-string scalars
    (numbers, booleans, None) are skipped.
    """
    if isinstance(data, dict):
        for key, value in data.items():
            yield from _iter_value(value, join_key(path, key))
    elif isinstance(data, list):
        for index, item in enumerate(data):
            yield from _iter_value(item, join_index(path, index))


def _iter_value(value: Any, path: str) -> Iterator[tuple[str, str]]:
    if isinstance(value, str):
        if value.strip():
            yield path, value
    elif isinstance(value, (dict, list)):
        yield from iter_string_leaves(value, path)
