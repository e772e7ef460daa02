"""
JSON encoding of documents for the value column.
"""

from __future__ import annotations

from typing import Any

import orjson

from keyv.exceptions import DeserializationError, SerializationError


def dumps_document(document: Any, key: str | None = None) -> str:
    """Serialize a document to JSON text.

    Raises:
        SerializationError: If the document holds non-JSON values.
    """
    try:
        return orjson.dumps(document).decode("utf-8")
    except orjson.JSONEncodeError as e:
        raise SerializationError(
            f"Value is not JSON serializable: {e}", context={"key": key}
        ) from e


def loads_document(raw: str | bytes, key: str | None = None) -> Any:
    """Deserialize JSON text from the value column.

    Raises:
        DeserializationError: If the stored text is not valid JSON.
    """
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DeserializationError(
            f"Stored value is not valid JSON: {e}", context={"key": key}
        ) from e
