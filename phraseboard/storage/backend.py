from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ..errors import CapacityExceeded, StorageError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..config import Settings


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class KeyValueBackend(Protocol):
    """Synchronous application-scoped key-value store.

    There are no transactional guarantees across keys. Writes that would
    exceed the backend's capacity raise :class:`CapacityExceeded` and leave
    the previous value untouched.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryBackend:
    """Dict-backed backend, optionally capacity bounded."""

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self.capacity_bytes = capacity_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.capacity_bytes is not None:
            used = sum(_entry_size(k, v) for k, v in self._data.items() if k != key)
            if used + _entry_size(key, value) > self.capacity_bytes:
                raise CapacityExceeded(
                    f"writing {key!r} would exceed {self.capacity_bytes} bytes", key=key
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileBackend:
    """One UTF-8 file per key inside ``directory``.

    Files are replaced atomically so an interrupted write never leaves a
    torn value behind.
    """

    suffix = ".json"

    def __init__(self, directory: str | Path, capacity_bytes: int | None = None) -> None:
        self.directory = Path(directory)
        self.capacity_bytes = capacity_bytes

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"invalid storage key {key!r}", key=key)
        return self.directory / f"{key}{self.suffix}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"could not read {key!r}: {exc}", key=key) from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        if self.capacity_bytes is not None:
            used = sum(_entry_size(k, v) for k, v in self._items() if k != key)
            if used + _entry_size(key, value) > self.capacity_bytes:
                raise CapacityExceeded(
                    f"writing {key!r} would exceed {self.capacity_bytes} bytes", key=key
                )
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.suffix)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise StorageError(f"could not write {key!r}: {exc}", key=key) from exc

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"could not remove {key!r}: {exc}", key=key) from exc

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name[: -len(self.suffix)]
            for p in self.directory.glob(f"*{self.suffix}")
            if not p.name.startswith(".")
        )

    def _items(self) -> list[tuple[str, str]]:
        items = []
        for key in self.keys():
            value = self.get(key)
            if value is not None:
                items.append((key, value))
        return items


def build_backend(settings: Settings) -> KeyValueBackend:
    """Return the backend selected by ``settings.storage_backend``."""

    if settings.storage_backend == "memory":
        return MemoryBackend(capacity_bytes=settings.storage_capacity_bytes)
    return FileBackend(settings.storage_dir, capacity_bytes=settings.storage_capacity_bytes)
