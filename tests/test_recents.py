from __future__ import annotations

import json
import logging

import pytest

from phraseboard.state.recents import MAX_RECENTS, RecencyCache, relative_time, short_label
from phraseboard.storage import MemoryBackend
from tests.fakes.flaky_backend import FlakyBackend


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _cache(backend=None, clock=None) -> RecencyCache:
    backend = backend if backend is not None else MemoryBackend()
    return RecencyCache(backend, "rec", clock=clock or _Clock())


def test_record_moves_repeat_to_front():
    cache = _cache()
    cache.record("a")
    cache.record("b")
    cache.record("a")
    assert [e.phrase for e in cache.list()] == ["a", "b"]


def test_record_caps_history():
    cache = _cache()
    for i in range(12):
        cache.record(f"phrase {i}")
    phrases = [e.phrase for e in cache.list()]
    assert len(phrases) == MAX_RECENTS
    assert phrases[0] == "phrase 11"
    assert phrases[-1] == "phrase 2"


def test_record_empty_phrase_is_noop():
    backend = MemoryBackend()
    cache = _cache(backend)
    assert cache.record("") is None
    assert len(cache) == 0
    assert backend.get("rec") is None


def test_record_persists_entries_with_millisecond_timestamps():
    backend = MemoryBackend()
    cache = _cache(backend, _Clock(12.5))
    entry = cache.record("I need water", "💧", "needs")
    assert entry.ts == 12_500
    assert json.loads(backend.get("rec")) == [
        {"phrase": "I need water", "emoji": "💧", "category": "needs", "ts": 12_500}
    ]


def test_list_returns_copies():
    cache = _cache()
    cache.record("hello")
    cache.list()[0].phrase = "changed"
    assert cache.get_all()[0].phrase == "hello"


def test_clear_empties_and_persists():
    backend = MemoryBackend()
    cache = _cache(backend)
    cache.record("a")
    cache.clear()
    assert cache.list() == []
    assert json.loads(backend.get("rec")) == []


def test_loads_lazily_and_tolerates_bad_entries():
    backend = MemoryBackend()
    stored = [
        {"phrase": "a", "ts": 5},
        {"phrase": ""},
        "junk",
        {"phrase": "a", "ts": 1},
        {"phrase": "b", "ts": "yesterday"},
    ]
    backend.set("rec", json.dumps(stored))
    cache = _cache(backend)
    entries = cache.list()
    assert [(e.phrase, e.ts) for e in entries] == [("a", 5), ("b", 0)]


def test_loads_nothing_from_corrupt_store(caplog):
    backend = MemoryBackend()
    backend.set("rec", "{not json")
    cache = _cache(backend)
    with caplog.at_level(logging.WARNING):
        assert cache.list() == []
    assert "storage_decode_failed" in caplog.text


def test_loads_nothing_from_non_list(caplog):
    backend = MemoryBackend()
    backend.set("rec", json.dumps({"phrase": "a"}))
    cache = _cache(backend)
    with caplog.at_level(logging.WARNING):
        assert len(cache) == 0
    assert "stored_recents_invalid" in caplog.text


def test_failed_write_keeps_memory_state(caplog):
    cache = _cache(FlakyBackend(fail_writes=True))
    with caplog.at_level(logging.ERROR):
        cache.record("still here")
    assert [e.phrase for e in cache.list()] == ["still here"]
    assert "storage_write_failed" in caplog.text


@pytest.mark.parametrize(
    "elapsed_ms, expected",
    [
        (0, "now"),
        (59_999, "now"),
        (60_000, "1m"),
        (59 * 60_000, "59m"),
        (3_600_000, "1h"),
        (23 * 3_600_000, "23h"),
        (48 * 3_600_000, "2d"),
    ],
)
def test_relative_time(elapsed_ms, expected):
    assert relative_time(1_000, 1_000 + elapsed_ms) == expected


@pytest.mark.parametrize(
    "phrase, expected",
    [
        ("I need some water", "Water"),
        ("I need some water please", "Water please"),
        ("Please call the nurse", "Call the nurse"),
        ("I want to talk to the doctor", "Talk to the do…"),
        ("Something hurts", "Something hurts"),
        ("My ", ""),
    ],
)
def test_short_label(phrase, expected):
    assert short_label(phrase) == expected


def test_render_bar_draws_now_and_after_changes():
    clock = _Clock(100.0)
    cache = _cache(clock=clock)
    cache.record("I need some water", "💧")
    drawn = []
    speak = object()

    cache.render_bar("recents", lambda cid, tiles, sp: drawn.append((cid, tiles, sp)), speak)

    cid, tiles, sp = drawn[-1]
    assert cid == "recents"
    assert sp is speak
    assert [(t.emoji, t.label, t.age) for t in tiles] == [("💧", "Water", "now")]

    clock.now = 220.0
    cache.record("Thanks")
    tiles = drawn[-1][1]
    assert [(t.emoji, t.label, t.age) for t in tiles] == [
        ("🔁", "Thanks", "now"),
        ("💧", "Water", "2m"),
    ]

    cache.unbind()
    cache.clear()
    assert len(drawn) == 2
