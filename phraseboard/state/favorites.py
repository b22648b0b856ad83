from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from ..metrics import favorites_count
from ..storage import KeyValueBackend, load_json, save_json
from ..storage.persist import dumps
from .views import FAVORITE_BADGE, FavoriteTileView, Renderer, RenderTarget, Speak

logger = logging.getLogger(__name__)

SAVED_PHRASE_EMOJI = "💬"
LABEL_WORDS = 3


def _iso(ts: float) -> str:
    stamp = datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


@dataclass
class FavoriteEntry:
    phrase: str
    emoji: str = ""
    label: str = ""
    added_at: str = ""

    def to_dict(self) -> dict:
        return {
            "phrase": self.phrase,
            "emoji": self.emoji,
            "label": self.label,
            "addedAt": self.added_at,
        }

    @classmethod
    def from_dict(cls, raw: object) -> FavoriteEntry | None:
        if not isinstance(raw, dict):
            return None
        phrase = raw.get("phrase")
        if not isinstance(phrase, str) or not phrase:
            return None
        emoji, label, added_at = (raw.get(k) for k in ("emoji", "label", "addedAt"))
        return cls(
            phrase=phrase,
            emoji=emoji if isinstance(emoji, str) else "",
            label=label if isinstance(label, str) and label else phrase,
            added_at=added_at if isinstance(added_at, str) else "",
        )


@dataclass
class PendingRemoval:
    """A favorite removal awaiting the user's answer.

    Nothing changes until :meth:`confirm`. :meth:`cancel` leaves the set,
    its order and the backend untouched. Either resolves it for good.
    """

    favorites: FavoriteSet
    phrase: str
    display_label: str
    resolved: bool = field(default=False, init=False)

    def confirm(self) -> bool:
        if self.resolved:
            return False
        self.resolved = True
        return self.favorites.remove(self.phrase)

    def cancel(self) -> None:
        self.resolved = True


class FavoriteSet:
    """User-curated phrases in insertion order, unique by phrase."""

    store_name = "favorites"

    def __init__(
        self,
        backend: KeyValueBackend,
        key: str = "phraseboard-favorites",
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.key = key
        self._clock = clock
        self._items: list[FavoriteEntry] | None = None
        self._target: RenderTarget | None = None

    def _entries(self) -> list[FavoriteEntry]:
        if self._items is None:
            self._items = self._load()
            favorites_count.set(len(self._items))
        return self._items

    def _load(self) -> list[FavoriteEntry]:
        raw = load_json(self.backend, self.key, store=self.store_name, default=[])
        if not isinstance(raw, list):
            logger.warning(
                "stored_favorites_invalid",
                extra={"event_type": "stored_favorites_invalid", "store": self.store_name},
            )
            return []
        items: list[FavoriteEntry] = []
        seen: set[str] = set()
        for value in raw:
            entry = FavoriteEntry.from_dict(value)
            if entry is None or entry.phrase in seen:
                continue
            seen.add(entry.phrase)
            items.append(entry)
        return items

    def _find(self, phrase: str) -> int | None:
        for idx, item in enumerate(self._entries()):
            if item.phrase == phrase:
                return idx
        return None

    # Mutations -------------------------------------------------------------

    def add(self, phrase: str, emoji: str = "", label: str | None = None) -> bool:
        """Append a favorite. Returns ``False`` if the phrase is already there."""

        if not phrase or self._find(phrase) is not None:
            return False
        self._entries().append(
            FavoriteEntry(
                phrase=phrase,
                emoji=emoji or "",
                label=label or phrase,
                added_at=_iso(self._clock()),
            )
        )
        self._commit()
        return True

    def remove(self, phrase: str) -> bool:
        idx = self._find(phrase)
        if idx is None:
            return False
        del self._entries()[idx]
        self._commit()
        return True

    def toggle(self, phrase: str, emoji: str = "", label: str | None = None) -> bool:
        """Flip membership and return the new state (``True`` = now a favorite)."""

        if self.is_favorite(phrase):
            self.remove(phrase)
            return False
        return self.add(phrase, emoji, label)

    def save_phrase(self, phrase: str, emoji: str | None = None) -> bool:
        """Save a composed phrase, labelled with its first three words."""

        if not phrase or not phrase.strip():
            return False
        phrase = phrase.strip()
        words = phrase.split()
        label = " ".join(words[:LABEL_WORDS])
        if len(words) > LABEL_WORDS:
            label += "..."
        return self.add(phrase, emoji or SAVED_PHRASE_EMOJI, label)

    def request_removal(self, phrase: str) -> PendingRemoval:
        """Start a confirm-before-remove interaction for ``phrase``."""

        idx = self._find(phrase)
        if idx is None:
            display = phrase
        else:
            fav = self._entries()[idx]
            display = f"{fav.emoji} {fav.label}"
        return PendingRemoval(self, phrase, display)

    # Queries ---------------------------------------------------------------

    def is_favorite(self, phrase: str) -> bool:
        return self._find(phrase) is not None

    def badge(self, phrase: str) -> str | None:
        return FAVORITE_BADGE if self.is_favorite(phrase) else None

    def get_all(self) -> list[FavoriteEntry]:
        return [replace(item) for item in self._entries()]

    def count(self) -> int:
        return len(self._entries())

    # Backup ----------------------------------------------------------------

    def export_json(self) -> str:
        return dumps([item.to_dict() for item in self._entries()], indent=2)

    def import_json(self, text: str) -> int:
        """Merge favorites from ``text``; returns how many were new.

        Malformed input imports nothing and leaves the set as it was.
        """

        try:
            imported = json.loads(text)
        except (TypeError, ValueError):
            logger.warning(
                "favorites_import_unparsable",
                extra={"event_type": "favorites_import_unparsable", "store": self.store_name},
            )
            return 0
        if not isinstance(imported, list):
            return 0
        added = 0
        for item in imported:
            if not isinstance(item, dict):
                continue
            phrase = item.get("phrase")
            if not isinstance(phrase, str) or not phrase:
                continue
            emoji = item.get("emoji")
            label = item.get("label")
            if self.add(
                phrase,
                emoji if isinstance(emoji, str) else "",
                label if isinstance(label, str) else None,
            ):
                added += 1
        return added

    # Rendering -------------------------------------------------------------

    def views(self) -> list[FavoriteTileView]:
        return [
            FavoriteTileView(phrase=item.phrase, emoji=item.emoji, label=item.label)
            for item in self._entries()
        ]

    def render_tab(
        self, container_id: str, renderer: Renderer, speak: Speak | None = None
    ) -> None:
        """Bind a render target and draw it now; later changes redraw it."""
        self._target = RenderTarget(container_id, renderer, speak)
        self._render()

    def unbind(self) -> None:
        self._target = None

    def _render(self) -> None:
        if self._target is not None:
            self._target.render(self.views())

    def _commit(self) -> None:
        items = self._entries()
        save_json(
            self.backend, self.key, [item.to_dict() for item in items], store=self.store_name
        )
        favorites_count.set(len(items))
        self._render()
