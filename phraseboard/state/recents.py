from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..metrics import recents_depth
from ..storage import KeyValueBackend, load_json, save_json
from .views import RECENT_FALLBACK_EMOJI, RecentTileView, RenderTarget, Renderer, Speak

logger = logging.getLogger(__name__)

MAX_RECENTS = 10

_LEAD_RE = re.compile(r"^(I need|I want|I am|I feel|Please|Help me|My)\s+", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"^(the|to|a|some|my)\s+", re.IGNORECASE)


def short_label(phrase: str) -> str:
    """Compact tile label: "I need some water please" -> "Water please".

    Strips one conversational lead-in and one article, capitalizes, and
    truncates anything longer than 16 characters to 14 plus an ellipsis.
    """
    stripped = _LEAD_RE.sub("", phrase, count=1)
    stripped = _ARTICLE_RE.sub("", stripped, count=1)
    stripped = stripped[:1].upper() + stripped[1:]
    if len(stripped) > 16:
        stripped = stripped[:14] + "…"
    return stripped


def relative_time(ts_ms: int, now_ms: int) -> str:
    secs = (now_ms - ts_ms) // 1000
    if secs < 60:
        return "now"
    mins = secs // 60
    if mins < 60:
        return f"{mins}m"
    hrs = mins // 60
    if hrs < 24:
        return f"{hrs}h"
    return f"{hrs // 24}d"


@dataclass
class RecentEntry:
    phrase: str
    emoji: str = ""
    category: str = ""
    ts: int = 0

    def to_dict(self) -> dict:
        return {
            "phrase": self.phrase,
            "emoji": self.emoji,
            "category": self.category,
            "ts": self.ts,
        }

    @classmethod
    def from_dict(cls, raw: object) -> RecentEntry | None:
        if not isinstance(raw, dict):
            return None
        phrase = raw.get("phrase")
        ts = raw.get("ts", 0)
        if not isinstance(phrase, str) or not phrase:
            return None
        if isinstance(ts, bool) or not isinstance(ts, (int, float)):
            ts = 0
        emoji = raw.get("emoji")
        category = raw.get("category")
        return cls(
            phrase=phrase,
            emoji=emoji if isinstance(emoji, str) else "",
            category=category if isinstance(category, str) else "",
            ts=int(ts),
        )


class RecencyCache:
    """Newest-first history of spoken phrases.

    Holds at most :data:`MAX_RECENTS` entries and never two with the same
    phrase; speaking a phrase again moves it to the front. The list is read
    from the backend on first use and kept in memory afterwards.
    """

    store_name = "recents"

    def __init__(
        self,
        backend: KeyValueBackend,
        key: str = "phraseboard-recents",
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.key = key
        self._clock = clock
        self._items: list[RecentEntry] | None = None
        self._target: RenderTarget | None = None

    def _entries(self) -> list[RecentEntry]:
        if self._items is None:
            self._items = self._load()
            recents_depth.set(len(self._items))
        return self._items

    def _load(self) -> list[RecentEntry]:
        raw = load_json(self.backend, self.key, store=self.store_name, default=[])
        if not isinstance(raw, list):
            logger.warning(
                "stored_recents_invalid",
                extra={"event_type": "stored_recents_invalid", "store": self.store_name},
            )
            return []
        items: list[RecentEntry] = []
        seen: set[str] = set()
        for value in raw:
            entry = RecentEntry.from_dict(value)
            if entry is None or entry.phrase in seen:
                continue
            seen.add(entry.phrase)
            items.append(entry)
        return items[:MAX_RECENTS]

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def record(self, phrase: str, emoji: str = "", category: str = "") -> RecentEntry | None:
        """Log a spoken phrase at the front of the history."""

        if not phrase:
            return None
        entry = RecentEntry(
            phrase=phrase, emoji=emoji or "", category=category or "", ts=self._now_ms()
        )
        items = [item for item in self._entries() if item.phrase != phrase]
        items.insert(0, entry)
        self._items = items[:MAX_RECENTS]
        self._commit()
        logger.debug(
            "recent_recorded",
            extra={"event_type": "recent_recorded", "store": self.store_name, "phrase": phrase},
        )
        return replace(entry)

    def list(self) -> list[RecentEntry]:
        """Entries, most recent first."""
        return [replace(item) for item in self._entries()]

    get_all = list

    def clear(self) -> None:
        self._items = []
        self._commit()

    def __len__(self) -> int:
        return len(self._entries())

    # Rendering -------------------------------------------------------------

    def views(self) -> list[RecentTileView]:
        now = self._now_ms()
        return [
            RecentTileView(
                phrase=item.phrase,
                emoji=item.emoji or RECENT_FALLBACK_EMOJI,
                label=short_label(item.phrase),
                age=relative_time(item.ts, now),
            )
            for item in self._entries()
        ]

    def render_bar(
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
        recents_depth.set(len(items))
        self._render()
