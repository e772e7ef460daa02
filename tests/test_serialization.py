"""
Tests for document serialization and the exception hierarchy.
"""

from __future__ import annotations

import pytest

from keyv.exceptions import (
    BackendUnavailableError,
    DeserializationError,
    KeyvError,
    QueryError,
    SerializationError,
)
from keyv.serialization import dumps_document, loads_document
from keyv.types import Row


class TestSerialization:
    """Test JSON encoding of documents."""

    def test_dumps_is_compact_json(self) -> None:
        assert dumps_document({"money": 100, "items": ["Apple"]}) == (
            '{"money":100,"items":["Apple"]}'
        )

    def test_unicode_preserved(self) -> None:
        assert loads_document(dumps_document({"name": "Zoë"})) == {"name": "Zoë"}

    def test_unserializable(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            dumps_document({"when": object()}, key="john")

        assert exc_info.value.context == {"key": "john"}

    def test_invalid_json(self) -> None:
        with pytest.raises(DeserializationError) as exc_info:
            loads_document("{not json", key="john")

        assert exc_info.value.context == {"key": "john"}

    def test_row_document(self) -> None:
        assert Row("john", '{"age":30}').document() == {"age": 30}
        assert Row("john", "1").to_dict() == {"key": "john", "value": "1"}


class TestExceptions:
    """Test the exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_type",
        [BackendUnavailableError, QueryError, SerializationError, DeserializationError],
    )
    def test_all_inherit_from_base(self, exc_type: type[KeyvError]) -> None:
        assert issubclass(exc_type, KeyvError)

    def test_str_includes_context(self) -> None:
        error = QueryError("insert failed", context={"table": "userinfo"})
        assert str(error) == "insert failed (table='userinfo')"

    def test_str_without_context(self) -> None:
        error = KeyvError("boom")
        assert str(error) == "boom"
        assert repr(error) == "KeyvError('boom', context={})"
