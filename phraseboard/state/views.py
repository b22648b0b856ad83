"""Read-only view models handed to the UI collaborator when rendering."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

Speak = Callable[[str], Any]
Renderer = Callable[[str, Sequence[Any], "Speak | None"], None]

FAVORITE_BADGE = "★"
RECENT_FALLBACK_EMOJI = "🔁"


@dataclass(frozen=True)
class RecentTileView:
    phrase: str
    emoji: str
    label: str
    age: str


@dataclass(frozen=True)
class FavoriteTileView:
    phrase: str
    emoji: str
    label: str
    badge: str = FAVORITE_BADGE


@dataclass
class RenderTarget:
    container_id: str
    renderer: Renderer
    speak: Speak | None = None

    def render(self, tiles: Sequence[Any]) -> None:
        self.renderer(self.container_id, list(tiles), self.speak)
