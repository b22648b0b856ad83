"""Handlers translating UI actions into store operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .events import ActionDispatcher
from .state.favorites import PendingRemoval
from .state.models import Direction
from .state.views import Speak

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .app import Board

logger = logging.getLogger(__name__)


def _tile_fields(event: dict, board: Board) -> tuple[str, str, str, str]:
    """Return ``(phrase, emoji, label, category)`` for a tile action.

    Events either reference a board tile by ``key``/``index`` or carry the
    phrase directly (recents bar, favorites tab, composed message).
    """

    key = event.get("key")
    index = event.get("index")
    if key is not None and index is not None:
        tile = board.categories.get_tile(key, int(index))
        return tile.phrase, tile.glyph, tile.label, key
    phrase = event.get("phrase") or ""
    emoji = event.get("emoji") or ""
    return phrase, emoji, event.get("label") or phrase, event.get("category") or ""


def handle_tile_tap(event: dict, board: Board, speak: Speak | None = None) -> str | None:
    """Speak a tile's phrase and log it in the recents history."""

    phrase, emoji, _label, category = _tile_fields(event, board)
    if not phrase:
        return None
    if speak is not None:
        speak(phrase)
    board.recents.record(phrase, emoji, category)
    return phrase


def handle_tile_long_press(event: dict, board: Board) -> bool:
    """Toggle a tile's favorite state; returns ``True`` if now a favorite."""

    phrase, emoji, label, _category = _tile_fields(event, board)
    added = board.favorites.toggle(phrase, emoji, label)
    logger.info(
        "favorite_toggled",
        extra={"event_type": "favorite_toggled", "store": "favorites", "added": added},
    )
    return added


def handle_favorite_long_press(event: dict, board: Board) -> PendingRemoval:
    """Long-press in the favorites tab asks before removing anything."""

    return board.favorites.request_removal(event.get("phrase") or "")


def handle_category_move(event: dict, board: Board, direction: Direction) -> bool:
    return board.categories.move_category(event["key"], direction)


def handle_category_delete(event: dict, board: Board) -> bool:
    if not event.get("confirmed"):
        return False
    board.categories.delete_category(event["key"])
    return True


def handle_tile_move(event: dict, board: Board, direction: Direction) -> bool:
    return board.categories.move_tile(event["key"], int(event["index"]), direction)


def handle_tile_delete(event: dict, board: Board) -> bool:
    if not event.get("confirmed"):
        return False
    board.categories.delete_tile(event["key"], int(event["index"]))
    return True


def handle_recents_clear(event: dict, board: Board) -> None:
    board.recents.clear()


def register_board_actions(
    dispatcher: ActionDispatcher, board: Board, speak: Speak | None = None
) -> ActionDispatcher:
    """Wire every board action onto ``dispatcher``."""

    dispatcher.on("tile-tap", lambda ev: handle_tile_tap(ev, board, speak))
    dispatcher.on("tile-long-press", lambda ev: handle_tile_long_press(ev, board))
    dispatcher.on("favorite-long-press", lambda ev: handle_favorite_long_press(ev, board))
    dispatcher.on("cat-up", lambda ev: handle_category_move(ev, board, Direction.UP))
    dispatcher.on("cat-down", lambda ev: handle_category_move(ev, board, Direction.DOWN))
    dispatcher.on("cat-delete", lambda ev: handle_category_delete(ev, board))
    dispatcher.on("tile-up", lambda ev: handle_tile_move(ev, board, Direction.UP))
    dispatcher.on("tile-down", lambda ev: handle_tile_move(ev, board, Direction.DOWN))
    dispatcher.on("tile-delete", lambda ev: handle_tile_delete(ev, board))
    dispatcher.on("recents-clear", lambda ev: handle_recents_clear(ev, board))
    return dispatcher
