"""The three stores and the content types they hold."""

from .board import CategoryStore
from .favorites import FavoriteEntry, FavoriteSet, PendingRemoval
from .models import Category, Direction, EmojiTile, ImageTile, Tile
from .recents import MAX_RECENTS, RecencyCache, RecentEntry, relative_time, short_label

__all__ = [
    "MAX_RECENTS",
    "Category",
    "CategoryStore",
    "Direction",
    "EmojiTile",
    "FavoriteEntry",
    "FavoriteSet",
    "ImageTile",
    "PendingRemoval",
    "RecencyCache",
    "RecentEntry",
    "Tile",
    "relative_time",
    "short_label",
]
