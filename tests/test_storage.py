from __future__ import annotations

import json
import logging

import pytest

from phraseboard.config import Settings
from phraseboard.errors import CapacityExceeded, ErrorKind, StorageError
from phraseboard.storage import (
    FileBackend,
    MemoryBackend,
    build_backend,
    erase,
    load_json,
    save_json,
)


def test_memory_backend_roundtrip_and_remove():
    backend = MemoryBackend()
    assert backend.get("a") is None
    backend.set("a", "1")
    backend.set("b", "2")
    assert backend.get("a") == "1"
    assert backend.keys() == ["a", "b"]
    backend.remove("a")
    backend.remove("a")
    assert backend.keys() == ["b"]


def test_memory_backend_capacity_keeps_previous_value():
    backend = MemoryBackend(capacity_bytes=10)
    backend.set("k", "12345")
    with pytest.raises(CapacityExceeded) as exc:
        backend.set("k", "x" * 20)
    assert exc.value.kind is ErrorKind.STORAGE
    assert exc.value.key == "k"
    assert backend.get("k") == "12345"
    # replacing a value only counts the new size
    backend.set("k", "123456789")


def test_file_backend_roundtrip(tmp_path):
    backend = FileBackend(tmp_path / "store")
    assert backend.get("cfg") is None
    assert backend.keys() == []
    backend.set("cfg", '{"a": "💧"}')
    assert (tmp_path / "store" / "cfg.json").read_text(encoding="utf-8") == '{"a": "💧"}'
    assert backend.get("cfg") == '{"a": "💧"}'
    backend.set("rec", "[]")
    assert backend.keys() == ["cfg", "rec"]
    backend.remove("cfg")
    backend.remove("cfg")
    assert backend.keys() == ["rec"]


def test_file_backend_leaves_no_temp_files(tmp_path):
    backend = FileBackend(tmp_path)
    backend.set("cfg", "one")
    backend.set("cfg", "two")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cfg.json"]


def test_file_backend_capacity(tmp_path):
    backend = FileBackend(tmp_path, capacity_bytes=20)
    backend.set("a", "x" * 10)
    with pytest.raises(CapacityExceeded):
        backend.set("b", "y" * 10)
    assert backend.get("b") is None
    assert backend.get("a") == "x" * 10


@pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
def test_file_backend_rejects_bad_keys(tmp_path, key):
    with pytest.raises(StorageError):
        FileBackend(tmp_path).set(key, "v")


def test_file_backend_read_error(tmp_path):
    (tmp_path / "cfg.json").mkdir()
    with pytest.raises(StorageError):
        FileBackend(tmp_path).get("cfg")


def test_load_json_defaults(caplog):
    backend = MemoryBackend()
    assert load_json(backend, "k", store="favorites", default=[]) == []
    backend.set("k", "not json")
    with caplog.at_level(logging.WARNING):
        assert load_json(backend, "k", store="favorites", default=[]) == []
    record = next(r for r in caplog.records if r.message == "storage_decode_failed")
    assert record.store == "favorites"
    assert record.error_category == "parse"


def test_save_json_reports_failure(caplog):
    backend = MemoryBackend(capacity_bytes=8)
    with caplog.at_level(logging.ERROR):
        assert save_json(backend, "k", ["a long value"], store="recents") is False
    record = next(r for r in caplog.records if r.message == "storage_write_failed")
    assert record.key == "k"
    assert record.error_category == "storage"
    assert record.bytes == len(json.dumps(["a long value"]))
    assert backend.get("k") is None


def test_save_json_keeps_non_ascii():
    backend = MemoryBackend()
    save_json(backend, "k", {"emoji": "😊"}, store="categories")
    assert backend.get("k") == '{"emoji": "😊"}'


def test_erase(tmp_path):
    backend = FileBackend(tmp_path)
    backend.set("k", "v")
    assert erase(backend, "k", store="categories") is True
    assert backend.get("k") is None
    assert erase(backend, "../k", store="categories") is False


def test_settings_require_distinct_keys():
    with pytest.raises(ValueError):
        Settings(recents_key="same", favorites_key="same")


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path))
    settings = Settings()
    assert settings.storage_backend == "memory"
    assert settings.storage_dir == tmp_path


def test_build_backend(tmp_path):
    file_backend = build_backend(Settings(storage_dir=tmp_path, storage_capacity_bytes=99))
    assert isinstance(file_backend, FileBackend)
    assert file_backend.directory == tmp_path
    assert file_backend.capacity_bytes == 99
    memory = build_backend(Settings(storage_backend="memory"))
    assert isinstance(memory, MemoryBackend)
