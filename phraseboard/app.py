from __future__ import annotations

import logging
import time
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass

from .config import Settings, get_settings
from .defaults import default_categories
from .state.board import CategoryStore, OnChanged
from .state.favorites import FavoriteSet
from .state.models import Category
from .state.recents import RecencyCache
from .storage import KeyValueBackend, build_backend


@dataclass
class Board:
    """The three stores bound to one backend."""

    settings: Settings
    backend: KeyValueBackend
    live: MutableMapping[str, Category]
    categories: CategoryStore
    recents: RecencyCache
    favorites: FavoriteSet


def open_board(
    settings: Settings | None = None,
    categories: MutableMapping[str, Category] | None = None,
    on_changed: OnChanged | None = None,
    *,
    backend: KeyValueBackend | None = None,
    clock: Callable[[], float] = time.time,
) -> Board:
    """Build the stores and bind the category store to ``categories``.

    ``categories`` is the caller's live mapping; it is mutated in place from
    here on. The shipped defaults are used when none is given. Recents and
    favorites read the backend lazily on first use.
    """

    settings = settings or get_settings()
    backend = backend or build_backend(settings)
    live = categories if categories is not None else default_categories()

    store = CategoryStore(backend, settings.config_key, clock=clock)
    store.initialize(live, on_changed)
    recents = RecencyCache(backend, settings.recents_key, clock=clock)
    favorites = FavoriteSet(backend, settings.favorites_key, clock=clock)

    logging.getLogger(__name__).info(
        "board_opened",
        extra={
            "event_type": "board_opened",
            "backend": settings.storage_backend,
            "categories": len(live),
        },
    )
    return Board(
        settings=settings,
        backend=backend,
        live=live,
        categories=store,
        recents=recents,
        favorites=favorites,
    )
