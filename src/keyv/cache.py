"""
In-process document cache.

One DocumentCache belongs to one KeyValueStore. It maps root keys to
their current documents and mirrors the backend table after init().
"""

from __future__ import annotations

import copy
from typing import Any, Mapping


class DocumentCache:
    """Root key -> document mapping with copy-on-read/write semantics.

    Documents are deep-copied on the way in and out so no caller holds a
    reference into cached state.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, root: str) -> Any | None:
        """Return a copy of the cached document, or None if absent."""
        if root not in self._entries:
            return None
        return copy.deepcopy(self._entries[root])

    def set(self, root: str, document: Any) -> None:
        self._entries[root] = copy.deepcopy(document)

    def has(self, root: str) -> bool:
        return root in self._entries

    def delete(self, root: str) -> bool:
        """Remove an entry. Returns True if it was present."""
        if root not in self._entries:
            return False
        del self._entries[root]
        return True

    def load(self, documents: Mapping[str, Any]) -> None:
        """Replace all entries with the given mapping."""
        self._entries = {root: copy.deepcopy(doc) for root, doc in documents.items()}

    def __len__(self) -> int:
        return len(self._entries)
