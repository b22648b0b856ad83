from __future__ import annotations

import json

from phraseboard.state.favorites import FavoriteSet, PendingRemoval
from phraseboard.storage import MemoryBackend
from tests.fakes.flaky_backend import FlakyBackend


def _favorites(backend=None) -> FavoriteSet:
    backend = backend if backend is not None else MemoryBackend()
    return FavoriteSet(backend, "fav", clock=lambda: 0.0)


def test_add_is_unique_by_phrase():
    favs = _favorites()
    assert favs.add("I need water", "💧", "Water") is True
    assert favs.add("I need water", "🚰", "Again") is False
    assert favs.count() == 1
    assert favs.get_all()[0].emoji == "💧"


def test_add_rejects_empty_phrase():
    backend = MemoryBackend()
    favs = _favorites(backend)
    assert favs.add("") is False
    assert backend.get("fav") is None


def test_add_persists_iso_timestamp_and_default_label():
    backend = MemoryBackend()
    favs = _favorites(backend)
    favs.add("Hello there", "👋")
    assert json.loads(backend.get("fav")) == [
        {
            "phrase": "Hello there",
            "emoji": "👋",
            "label": "Hello there",
            "addedAt": "1970-01-01T00:00:00.000Z",
        }
    ]


def test_toggle_twice_restores_state():
    favs = _favorites()
    favs.add("a")
    assert favs.toggle("b", "🅱") is True
    assert favs.is_favorite("b")
    assert favs.toggle("b") is False
    assert [f.phrase for f in favs.get_all()] == ["a"]


def test_remove_unknown_phrase():
    backend = FlakyBackend()
    favs = _favorites(backend)
    assert favs.remove("missing") is False
    assert backend.writes() == []


def test_save_phrase_labels_with_first_words():
    favs = _favorites()
    assert favs.save_phrase("  I want to go outside  ") is True
    saved = favs.get_all()[0]
    assert saved.phrase == "I want to go outside"
    assert saved.label == "I want to..."
    assert saved.emoji == "💬"

    assert favs.save_phrase("Thank you", "🙏") is True
    assert favs.get_all()[1].label == "Thank you"
    assert favs.save_phrase("   ") is False


def test_badge():
    favs = _favorites()
    favs.add("hi")
    assert favs.badge("hi") == "★"
    assert favs.badge("bye") is None


def test_pending_removal_cancel_touches_nothing():
    backend = FlakyBackend()
    favs = _favorites(backend)
    favs.add("a", "🅰", "A")
    favs.add("b", "🅱", "B")
    writes = len(backend.writes())

    pending = favs.request_removal("a")
    assert isinstance(pending, PendingRemoval)
    assert pending.display_label == "🅰 A"
    pending.cancel()

    assert [f.phrase for f in favs.get_all()] == ["a", "b"]
    assert len(backend.writes()) == writes
    assert pending.confirm() is False


def test_pending_removal_confirm_removes_once():
    favs = _favorites()
    favs.add("a")
    pending = favs.request_removal("a")
    assert pending.confirm() is True
    assert favs.count() == 0
    assert pending.confirm() is False


def test_request_removal_of_unknown_phrase():
    favs = _favorites()
    pending = favs.request_removal("ghost")
    assert pending.display_label == "ghost"
    assert pending.confirm() is False


def test_export_then_import_into_fresh_set():
    favs = _favorites()
    favs.add("a", "🅰", "A")
    favs.add("b")
    text = favs.export_json()
    assert text.startswith("[\n  {")
    assert "🅰" in text

    other = _favorites()
    other.add("b")
    assert other.import_json(text) == 1
    assert [f.phrase for f in other.get_all()] == ["b", "a"]
    assert other.get_all()[1].label == "A"


def test_import_skips_bad_items_and_rejects_malformed_text():
    favs = _favorites()
    payload = json.dumps([{"phrase": "ok"}, {"emoji": "x"}, 3, {"phrase": ""}])
    assert favs.import_json(payload) == 1
    assert favs.import_json("{nope") == 0
    assert favs.import_json(json.dumps({"phrase": "x"})) == 0
    assert [f.phrase for f in favs.get_all()] == ["ok"]


def test_loads_lazily_from_backend():
    backend = FlakyBackend()
    backend.set(
        "fav",
        json.dumps([{"phrase": "a", "emoji": "🅰"}, {"phrase": "a"}, {"label": "no phrase"}]),
    )
    favs = _favorites(backend)
    assert ("get", "fav") not in backend.calls
    assert favs.is_favorite("a")
    assert favs.get_all()[0].label == "a"
    assert favs.count() == 1


def test_render_tab_redraws_on_change():
    favs = _favorites()
    favs.add("a", "🅰", "A")
    drawn = []
    favs.render_tab("favorites", lambda cid, tiles, speak: drawn.append(tiles))
    assert [(t.label, t.badge) for t in drawn[-1]] == [("A", "★")]

    favs.add("b", "🅱", "B")
    assert [t.phrase for t in drawn[-1]] == ["a", "b"]
    favs.request_removal("a").confirm()
    assert [t.phrase for t in drawn[-1]] == ["b"]
    assert len(drawn) == 3

    favs.unbind()
    favs.add("c")
    assert len(drawn) == 3
