"""
Custom exception hierarchy for the keyv store.

All exceptions inherit from KeyvError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class KeyvError(Exception):
    """Base exception for all keyv errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(KeyvError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Postgres backend selected without PG_USER / PG_DATABASE
        - Table name that is not a plain SQL identifier
    """

    pass


class BackendUnavailableError(KeyvError):
    """Raised when the backend cannot be reached or opened.

    Context should include:
        - backend: The backend name (sqlite, postgres)
        - target: The file path or host:port being opened
    """

    pass


class QueryError(KeyvError):
    """Raised when a statement fails against an open backend.

    Context should include:
        - backend: The backend name
        - table: The table being queried
        - operation: The backend operation (insert, upsert, ...)
    """

    pass


class SerializationError(KeyvError):
    """Raised when a document cannot be encoded as JSON."""

    pass


class DeserializationError(KeyvError):
    """Raised when a stored value is not valid JSON.

    Context should include:
        - key: The root key of the offending row
    """

    pass


class InvalidKeyError(KeyvError):
    """Raised for malformed dotted keys (empty, or with empty segments)."""

    pass


class UnsupportedOperationError(KeyvError):
    """Raised for operations the store does not implement, such as nested delete."""

    pass
