"""Key-value backends and the JSON persistence helpers the stores share."""

from .backend import FileBackend, KeyValueBackend, MemoryBackend, build_backend
from .persist import erase, load_json, save_json

__all__ = [
    "FileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "build_backend",
    "erase",
    "load_json",
    "save_json",
]
