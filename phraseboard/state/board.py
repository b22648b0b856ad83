from __future__ import annotations

import copy
import json
import logging
import random
import string
import time
from collections.abc import Callable, MutableMapping

from ..errors import ErrorKind, NotFoundError, ParseError, SchemaError, ValidationError
from ..metrics import categories_count
from ..storage import KeyValueBackend, erase, load_json, save_json
from ..storage.persist import dumps
from .models import (
    DEFAULT_CATEGORY_CLASS,
    DEFAULT_CATEGORY_EMOJI,
    DEFAULT_TILE_EMOJI,
    MAX_LABEL_CHARS,
    MAX_PHRASE_CHARS,
    Category,
    Direction,
    EmojiTile,
    ImageTile,
    Tile,
    categories_from_dict,
    categories_to_dict,
    category_from_dict,
    clean_text,
    is_image_reference,
    make_tile,
)

logger = logging.getLogger(__name__)

OnChanged = Callable[[], None]
Categories = MutableMapping[str, Category]

_BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n <= 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class CategoryStore:
    """Owner of the ordered category/tile collection.

    The store is bound to a caller-owned mapping at :meth:`initialize` and
    mutates that very object in place, so anything holding the reference
    sees updates without re-binding. All writes go through the store's
    methods. Each committed mutation persists the full mapping under one
    backend key and then calls ``on_changed`` exactly once.
    """

    store_name = "categories"

    def __init__(
        self,
        backend: KeyValueBackend,
        key: str = "phraseboard-config",
        *,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self.backend = backend
        self.key = key
        self._clock = clock
        self._rng = rng or random.Random()
        self._live: Categories | None = None
        self._defaults: dict[str, Category] | None = None
        self._on_changed: OnChanged | None = None
        self._selected: str | None = None

    # Lifecycle -------------------------------------------------------------

    def initialize(self, live: Categories, on_changed: OnChanged | None = None) -> None:
        """Bind to ``live`` and apply any persisted override to it in place.

        The defaults are deep-copied before the override is applied and are
        never touched again. They must pass the same rules as an import, so
        anything the store later saves can be exported and imported back;
        otherwise :class:`SchemaError` is raised and nothing is bound.
        Unreadable or invalid persisted data is logged and ignored, leaving
        ``live`` as given.
        """

        for key, cat in live.items():
            category_from_dict(key, cat.to_dict())
        self._defaults = copy.deepcopy(dict(live))
        self._on_changed = on_changed
        self._live = live
        self._selected = None
        saved = self._load_override()
        if saved is not None:
            self._replace(saved)
            logger.info(
                "config_restored",
                extra={"event_type": "config_restored", "store": self.store_name, "key": self.key},
            )
        categories_count.set(len(live))

    @property
    def live(self) -> Categories:
        if self._live is None:
            raise RuntimeError("CategoryStore.initialize() has not been called")
        return self._live

    @property
    def defaults(self) -> dict[str, Category]:
        """A fresh copy of the snapshot captured at :meth:`initialize`."""
        return copy.deepcopy(self._defaults or {})

    # Accessors -------------------------------------------------------------

    def list_category_keys(self) -> list[str]:
        return list(self.live)

    def get_category(self, key: str) -> Category:
        return copy.deepcopy(self._category(key))

    def get_tile(self, key: str, index: int) -> Tile:
        return copy.deepcopy(self._tile(key, index))

    def get_display_name(self, key: str) -> str:
        cat = self.live.get(key)
        if cat is not None and cat.name:
            return cat.name
        return key[:1].upper() + key[1:]

    def get_display_emoji(self, key: str) -> str:
        cat = self.live.get(key)
        if cat is not None and cat.emoji:
            return cat.emoji
        if cat is not None and cat.tiles:
            return cat.tiles[0].glyph
        return DEFAULT_CATEGORY_EMOJI

    @property
    def selected_category(self) -> str | None:
        return self._selected

    def select_category(self, key: str) -> None:
        self._category(key)
        self._selected = key

    def clear_selection(self) -> None:
        self._selected = None

    # Categories ------------------------------------------------------------

    def move_category(self, key: str, direction: Direction | str) -> bool:
        """Swap ``key`` with its neighbour. Returns ``False`` at either end."""

        direction = Direction(direction)
        keys = list(self.live)
        if key not in self.live:
            raise NotFoundError(f"category {key!r} not found", key=key)
        idx = keys.index(key)
        target = idx + direction.step
        if target < 0 or target >= len(keys):
            return False
        keys[idx], keys[target] = keys[target], keys[idx]
        self._replace({k: self.live[k] for k in keys})
        self._commit()
        return True

    def add_category(
        self,
        name: str,
        emoji: str | None = None,
        style_class: str | None = None,
    ) -> str:
        name = clean_text(name, "name")
        key = self._new_key()
        self.live[key] = Category(
            name=name,
            emoji=emoji or DEFAULT_CATEGORY_EMOJI,
            class_name=style_class or DEFAULT_CATEGORY_CLASS,
            tiles=[],
        )
        self._commit()
        logger.info(
            "category_added",
            extra={"event_type": "category_added", "store": self.store_name, "key": key},
        )
        return key

    def edit_category(
        self,
        key: str,
        name: str,
        emoji: str | None = None,
        style_class: str | None = None,
    ) -> None:
        name = clean_text(name, "name", key=key)
        cat = self._category(key)
        cat.name = name
        if emoji is not None:
            cat.emoji = emoji
        if style_class is not None:
            cat.class_name = style_class
        self._commit()

    def delete_category(self, key: str) -> Category:
        """Remove a category and all of its tiles.

        Callers confirm with the user first; the store does not ask.
        """

        cat = self._category(key)
        del self.live[key]
        if self._selected == key:
            self._selected = None
        self._commit()
        logger.info(
            "category_deleted",
            extra={"event_type": "category_deleted", "store": self.store_name, "key": key},
        )
        return cat

    # Tiles -----------------------------------------------------------------

    def add_tile(
        self,
        key: str,
        label: str,
        phrase: str,
        *,
        emoji: str | None = None,
        image: str | None = None,
    ) -> int:
        """Append a tile and return its index."""

        cat = self._category(key)
        tile = make_tile(label, phrase, emoji=emoji, image=image, key=key)
        cat.tiles.append(tile)
        self._commit()
        return len(cat.tiles) - 1

    def add_quick_phrase(
        self, key: str, label: str, phrase: str, emoji: str = DEFAULT_TILE_EMOJI
    ) -> int:
        return self.add_tile(key, label, phrase, emoji=emoji)

    def edit_tile(
        self,
        key: str,
        index: int,
        *,
        label: str | None = None,
        phrase: str | None = None,
        emoji: str | None = None,
        image: str | None = None,
    ) -> Tile:
        """Update a tile's fields; ``None`` leaves a field unchanged.

        An image tile given an ``emoji`` becomes an emoji tile. An emoji tile
        cannot be given an image in the same edit.
        """

        tile = self._tile(key, index)
        new_label = tile.label if label is None else label
        new_phrase = tile.phrase if phrase is None else phrase
        new_label = clean_text(new_label, "label", MAX_LABEL_CHARS, key=key, index=index)
        new_phrase = clean_text(new_phrase, "phrase", MAX_PHRASE_CHARS, key=key, index=index)

        if emoji is not None and image is not None:
            raise ValidationError(
                "a tile has either an emoji or an image, not both",
                key=key,
                index=index,
                field="image",
            )

        updated: Tile
        if isinstance(tile, ImageTile):
            if emoji is not None:
                updated = EmojiTile(
                    label=new_label, phrase=new_phrase, emoji=emoji or DEFAULT_TILE_EMOJI
                )
            else:
                new_image = tile.image if image is None else image
                if not is_image_reference(new_image):
                    raise ValidationError(
                        "image must be a base64 data:image URL",
                        key=key,
                        index=index,
                        field="image",
                    )
                updated = ImageTile(label=new_label, phrase=new_phrase, image=new_image.strip())
        else:
            if image is not None:
                raise ValidationError(
                    "an emoji tile cannot switch to an image in the same edit",
                    key=key,
                    index=index,
                    field="image",
                )
            updated = EmojiTile(
                label=new_label,
                phrase=new_phrase,
                emoji=tile.emoji if emoji is None else emoji,
            )

        self.live[key].tiles[index] = updated
        self._commit()
        return updated

    def move_tile(self, key: str, index: int, direction: Direction | str) -> bool:
        direction = Direction(direction)
        self._tile(key, index)
        tiles = self.live[key].tiles
        target = index + direction.step
        if target < 0 or target >= len(tiles):
            return False
        tiles[index], tiles[target] = tiles[target], tiles[index]
        self._commit()
        return True

    def delete_tile(self, key: str, index: int) -> Tile:
        """Remove and return a tile. Callers confirm with the user first."""

        self._tile(key, index)
        tile = self.live[key].tiles.pop(index)
        self._commit()
        return tile

    # Import / export / reset ----------------------------------------------

    def export_configuration(self) -> str:
        return dumps(categories_to_dict(self.live), indent=2)

    def import_configuration(self, text: str) -> None:
        """Replace every category with the ones in ``text``.

        All-or-nothing: the whole document is validated before the live
        mapping is touched.
        """

        try:
            parsed = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise ParseError("invalid JSON") from exc
        categories = categories_from_dict(parsed)
        self._replace(categories)
        if self._selected not in self.live:
            self._selected = None
        self._commit()
        logger.info(
            "config_imported",
            extra={"event_type": "config_imported", "store": self.store_name, "key": self.key},
        )

    def reset_to_defaults(self) -> None:
        """Restore the initial snapshot and drop the persisted override.

        The backend key is removed rather than rewritten, so a later start
        uses whatever defaults the application ships with.
        """

        if self._defaults is None:
            raise RuntimeError("CategoryStore.initialize() has not been called")
        self._replace(copy.deepcopy(self._defaults))
        if self._selected not in self.live:
            self._selected = None
        erase(self.backend, self.key, store=self.store_name)
        categories_count.set(len(self.live))
        self._notify()

    def get_effective_categories(self) -> dict[str, Category]:
        """Persisted override if there is one, otherwise a copy of the defaults."""

        saved = self._load_override()
        if saved is not None:
            return saved
        if self._defaults is not None:
            return copy.deepcopy(self._defaults)
        return copy.deepcopy(dict(self._live or {}))

    # Internals -------------------------------------------------------------

    def _category(self, key: str) -> Category:
        try:
            return self.live[key]
        except KeyError:
            raise NotFoundError(f"category {key!r} not found", key=key) from None

    def _tile(self, key: str, index: int) -> Tile:
        tiles = self._category(key).tiles
        if not 0 <= index < len(tiles):
            raise NotFoundError(f"tile {index} not found in {key!r}", key=key, index=index)
        return tiles[index]

    def _new_key(self) -> str:
        while True:
            stamp = _base36(int(self._clock() * 1000))
            suffix = "".join(self._rng.choice(_BASE36) for _ in range(4))
            key = f"cat_{stamp}_{suffix}"
            if key not in self.live:
                return key

    def _replace(self, categories: dict[str, Category]) -> None:
        # Clear and repopulate so holders of the live mapping stay valid.
        live = self.live
        live.clear()
        for key, cat in categories.items():
            live[key] = cat

    def _load_override(self) -> dict[str, Category] | None:
        raw = load_json(self.backend, self.key, store=self.store_name)
        if raw is None:
            return None
        try:
            return categories_from_dict(raw, strict=False)
        except SchemaError as exc:
            logger.warning(
                "stored_config_invalid",
                extra={
                    "event_type": "stored_config_invalid",
                    "store": self.store_name,
                    "key": self.key,
                    "error_category": ErrorKind.SCHEMA.value,
                    "reason": exc.reason,
                },
            )
            return None

    def _commit(self) -> None:
        save_json(self.backend, self.key, categories_to_dict(self.live), store=self.store_name)
        categories_count.set(len(self.live))
        self._notify()

    def _notify(self) -> None:
        if self._on_changed is not None:
            self._on_changed()
