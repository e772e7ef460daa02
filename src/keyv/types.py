"""
Core types for the keyv store.

- Document: the JSON-compatible value stored under a root key
- Row: one (key, value) row as held by a backend
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from keyv.serialization import loads_document

Document = Union[str, int, float, bool, None, list[Any], dict[str, Any]]


@dataclass(frozen=True)
class Row:
    """A persisted row: root key plus its serialized document."""

    key: str
    value: str

    def document(self) -> Document:
        """Deserialize the stored value."""
        return loads_document(self.value, key=self.key)

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}
