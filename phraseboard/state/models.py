"""Board content types and their JSON-compatible representation.

A tile is either emoji-backed or image-backed, never both. Both variants
share ``label`` and ``phrase``; the persisted form is::

    {"label": ..., "phrase": ..., "emoji": ...}
    {"label": ..., "phrase": ..., "image": "data:image/png;base64,..."}
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..errors import BoardError, SchemaError, ValidationError

MAX_LABEL_CHARS = 30
MAX_PHRASE_CHARS = 200

DEFAULT_TILE_EMOJI = "😊"
IMAGE_TILE_GLYPH = "🖼"
DEFAULT_CATEGORY_EMOJI = "📁"
DEFAULT_CATEGORY_CLASS = "cat-custom1"

DATA_URI_RE = re.compile(r"^data:image/[a-z0-9.+-]+;base64,[a-z0-9+/=\s]+$", re.IGNORECASE)


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"

    @property
    def step(self) -> int:
        return -1 if self is Direction.UP else 1


@dataclass
class EmojiTile:
    label: str
    phrase: str
    emoji: str = DEFAULT_TILE_EMOJI

    @property
    def glyph(self) -> str:
        return self.emoji

    def to_dict(self) -> dict:
        return {"label": self.label, "phrase": self.phrase, "emoji": self.emoji}


@dataclass
class ImageTile:
    label: str
    phrase: str
    image: str

    @property
    def glyph(self) -> str:
        return IMAGE_TILE_GLYPH

    def to_dict(self) -> dict:
        return {"label": self.label, "phrase": self.phrase, "image": self.image}


Tile = Union[EmojiTile, ImageTile]


@dataclass
class Category:
    name: str = ""
    emoji: str = ""
    class_name: str = ""
    tiles: list[Tile] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "emoji": self.emoji,
            "className": self.class_name,
            "tiles": [t.to_dict() for t in self.tiles],
        }


def is_image_reference(value: object) -> bool:
    """Return ``True`` if ``value`` looks like a base64 image data URI."""
    return isinstance(value, str) and bool(DATA_URI_RE.match(value.strip()))


def clean_text(
    value: object,
    field_name: str,
    limit: int | None = None,
    *,
    error: type[BoardError] = ValidationError,
    key: str | None = None,
    index: int | None = None,
) -> str:
    """Strip ``value`` and require it to be a non-empty string within ``limit``."""

    if not isinstance(value, str) or not value.strip():
        raise error(f"{field_name} is required", key=key, index=index, field=field_name)
    text = value.strip()
    if limit is not None and len(text) > limit:
        raise error(
            f"{field_name} must be at most {limit} characters",
            key=key,
            index=index,
            field=field_name,
        )
    return text


def make_tile(
    label: object,
    phrase: object,
    *,
    emoji: str | None = None,
    image: str | None = None,
    error: type[BoardError] = ValidationError,
    key: str | None = None,
    index: int | None = None,
    strict: bool = True,
) -> Tile:
    """Validate the fields of a new tile and build the matching variant.

    With ``strict`` off only a label and a phrase are required; length
    limits and the data-URI check are skipped.
    """

    label_limit = MAX_LABEL_CHARS if strict else None
    phrase_limit = MAX_PHRASE_CHARS if strict else None
    label = clean_text(label, "label", label_limit, error=error, key=key, index=index)
    phrase = clean_text(phrase, "phrase", phrase_limit, error=error, key=key, index=index)
    if image is not None:
        if emoji is not None:
            raise error(
                "a tile has either an emoji or an image, not both",
                key=key,
                index=index,
                field="image",
            )
        if strict and not is_image_reference(image):
            raise error(
                "image must be a base64 data:image URL", key=key, index=index, field="image"
            )
        return ImageTile(label=label, phrase=phrase, image=image.strip())
    return EmojiTile(label=label, phrase=phrase, emoji=emoji or DEFAULT_TILE_EMOJI)


def tile_from_dict(raw: object, *, key: str, index: int, strict: bool = True) -> Tile:
    if not isinstance(raw, Mapping):
        raise SchemaError(f"tile {index} in {key!r} is invalid", key=key, index=index)
    image = raw.get("image")
    emoji = raw.get("emoji")
    if emoji is not None and not isinstance(emoji, str):
        raise SchemaError(
            f"tile {index} in {key!r} has an invalid emoji", key=key, index=index, field="emoji"
        )
    if image is not None and not isinstance(image, str):
        raise SchemaError(
            f"tile {index} in {key!r} has an invalid image", key=key, index=index, field="image"
        )
    if image and image.strip():
        # Older exports carry a placeholder emoji next to the image.
        emoji = None
    else:
        image = None
    return make_tile(
        raw.get("label"),
        raw.get("phrase"),
        emoji=emoji or None,
        image=image,
        error=SchemaError,
        key=key,
        index=index,
        strict=strict,
    )


def category_from_dict(key: str, raw: object, *, strict: bool = True) -> Category:
    if not isinstance(raw, Mapping):
        raise SchemaError(f"category {key!r} is invalid", key=key)
    tiles = raw.get("tiles")
    if not isinstance(tiles, list):
        raise SchemaError(f"category {key!r} must have a tiles array", key=key, field="tiles")
    for name in ("name", "emoji", "className"):
        value = raw.get(name)
        if value is not None and not isinstance(value, str):
            raise SchemaError(f"category {key!r} has an invalid {name}", key=key, field=name)
    return Category(
        name=raw.get("name") or "",
        emoji=raw.get("emoji") or "",
        class_name=raw.get("className") or "",
        tiles=[
            tile_from_dict(t, key=key, index=i, strict=strict) for i, t in enumerate(tiles)
        ],
    )


def categories_from_dict(raw: object, *, strict: bool = True) -> dict[str, Category]:
    """Validate a whole configuration and return it as categories.

    Raises :class:`SchemaError` on the first structural problem; nothing is
    returned unless every category and tile passes. ``strict`` is for
    imported documents: it requires at least one category and applies the
    tile length and image rules. Stored configurations are read with it off,
    where an empty mapping is a valid board.
    """

    if not isinstance(raw, Mapping):
        raise SchemaError("configuration must be a JSON object")
    if strict and not raw:
        raise SchemaError("configuration must contain at least one category")
    return {
        str(key): category_from_dict(str(key), value, strict=strict)
        for key, value in raw.items()
    }


def categories_to_dict(categories: Mapping[str, Category]) -> dict[str, dict]:
    return {key: cat.to_dict() for key, cat in categories.items()}
