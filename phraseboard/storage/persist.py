"""Best-effort JSON persistence shared by the stores.

Writes never raise into the caller: a failing backend is logged and the
in-memory state stays authoritative until the next successful write.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..errors import ErrorKind, StorageError
from ..metrics import (
    storage_read_failures_total,
    storage_write_failures_total,
    storage_write_ms,
    storage_writes_total,
)
from .backend import KeyValueBackend

logger = logging.getLogger(__name__)


def dumps(value: Any, *, indent: int | None = None) -> str:
    return json.dumps(value, ensure_ascii=False, indent=indent)


def load_json(backend: KeyValueBackend, key: str, *, store: str, default: Any = None) -> Any:
    """Return the decoded value under ``key`` or ``default``.

    Missing keys, backend read errors and undecodable text all yield
    ``default``; the last two are logged.
    """

    try:
        raw = backend.get(key)
    except StorageError as exc:
        storage_read_failures_total.inc()
        logger.warning(
            "storage_read_failed",
            extra={
                "event_type": "storage_read_failed",
                "store": store,
                "key": key,
                "error_category": ErrorKind.STORAGE.value,
                "reason": exc.reason,
            },
        )
        return default
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        storage_read_failures_total.inc()
        logger.warning(
            "storage_decode_failed",
            extra={
                "event_type": "storage_decode_failed",
                "store": store,
                "key": key,
                "error_category": ErrorKind.PARSE.value,
            },
        )
        return default


def save_json(backend: KeyValueBackend, key: str, value: Any, *, store: str) -> bool:
    """Serialize ``value`` under ``key``. Returns ``False`` if the write failed."""

    text = dumps(value)
    try:
        with storage_write_ms.time():
            backend.set(key, text)
    except StorageError as exc:
        storage_write_failures_total.inc()
        logger.error(
            "storage_write_failed",
            extra={
                "event_type": "storage_write_failed",
                "store": store,
                "key": key,
                "bytes": len(text.encode("utf-8")),
                "error_category": ErrorKind.STORAGE.value,
                "reason": exc.reason,
            },
        )
        return False
    storage_writes_total.inc()
    logger.debug(
        "storage_write",
        extra={"event_type": "storage_write", "store": store, "key": key},
    )
    return True


def erase(backend: KeyValueBackend, key: str, *, store: str) -> bool:
    """Remove ``key`` from the backend. Returns ``False`` if removal failed."""

    try:
        backend.remove(key)
    except StorageError as exc:
        storage_write_failures_total.inc()
        logger.error(
            "storage_remove_failed",
            extra={
                "event_type": "storage_remove_failed",
                "store": store,
                "key": key,
                "error_category": ErrorKind.STORAGE.value,
                "reason": exc.reason,
            },
        )
        return False
    return True
