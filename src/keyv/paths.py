"""
Dotted-key resolution.

A user key such as ``"user.profile.name"`` is split into a root key
(``"user"``), which names one stored row, and a property path
(``"profile.name"``) walked inside that row's document. All functions here
are pure: documents passed in are never mutated.
"""

from __future__ import annotations

import copy
from typing import Any

from keyv.exceptions import InvalidKeyError

SEPARATOR = "."


class _Missing:
    """Sentinel type for a path that does not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def split_key(key: str) -> tuple[str, str]:
    """Split a dotted key into (root, path).

    Args:
        key: User key, e.g. ``"user.money"``.

    Returns:
        Tuple of root key and the remaining path (``""`` for root-only keys).

    Raises:
        InvalidKeyError: If the key is not a string, is empty, or has an
            empty segment.
    """
    if not isinstance(key, str):
        raise InvalidKeyError("Key must be a string", context={"key": key})
    if not key:
        raise InvalidKeyError("Key must not be empty")

    segments = key.split(SEPARATOR)
    if any(not segment for segment in segments):
        raise InvalidKeyError("Key has an empty path segment", context={"key": key})

    return segments[0], SEPARATOR.join(segments[1:])


def _segments(path: str) -> list[str]:
    return path.split(SEPARATOR) if path else []


def resolve_get(document: Any, path: str) -> Any:
    """Read the value at path inside document.

    Returns:
        The value, or MISSING when a segment is absent or an intermediate
        value is not a mapping. A stored None is returned as None.
    """
    current = document
    for segment in _segments(path):
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def resolve_has(document: Any, path: str) -> bool:
    """Return True if the final segment of path exists, whatever its value."""
    return resolve_get(document, path) is not MISSING


def resolve_set(document: Any, path: str, value: Any) -> Any:
    """Return a new document with value placed at path.

    An empty path replaces the whole document. Missing intermediate levels
    are created as mappings; a non-mapping document or intermediate value
    is replaced by a mapping.
    """
    segments = _segments(path)
    if not segments:
        return copy.deepcopy(value)

    root = copy.deepcopy(document) if isinstance(document, dict) else {}
    current = root
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = copy.deepcopy(value)
    return root
