from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification for store failures and error logging."""

    VALIDATION = "validation"
    SCHEMA = "schema"
    PARSE = "parse"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class BoardError(Exception):
    """Base class for every failure raised by the stores.

    Carries structured fields so callers can react to the offending
    category key, tile index or field without parsing the message.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        reason: str,
        *,
        key: str | None = None,
        index: int | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.key = key
        self.index = index
        self.field = field

    def __str__(self) -> str:
        return self.reason


class ValidationError(BoardError):
    """A required field is empty or malformed."""

    kind = ErrorKind.VALIDATION


class SchemaError(BoardError):
    """Imported configuration has the wrong structure."""

    kind = ErrorKind.SCHEMA


class ParseError(BoardError):
    """Imported text is not valid JSON."""

    kind = ErrorKind.PARSE


class NotFoundError(BoardError):
    """An operation referenced an absent category or tile."""

    kind = ErrorKind.NOT_FOUND


class StorageError(BoardError):
    """The key-value backend failed to read or write."""

    kind = ErrorKind.STORAGE


class CapacityExceeded(StorageError):
    """A write would exceed the backend's capacity."""
