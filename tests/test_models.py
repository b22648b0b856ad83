import pytest

from phraseboard.errors import ErrorKind, SchemaError
from phraseboard.state.models import (
    Category,
    Direction,
    EmojiTile,
    ImageTile,
    categories_from_dict,
    categories_to_dict,
    is_image_reference,
    tile_from_dict,
)

PNG = "data:image/png;base64,iVBORw0KGgo="


def test_tile_from_dict_variants():
    assert tile_from_dict({"label": "A", "phrase": "Alpha"}, key="k", index=0) == EmojiTile(
        "A", "Alpha", "😊"
    )
    raw = {"label": "P", "phrase": "Pic", "emoji": "🖼", "image": PNG}
    tile = tile_from_dict(raw, key="k", index=1)
    assert tile == ImageTile("P", "Pic", PNG)
    assert tile.glyph == "🖼"


def test_tile_from_dict_errors_carry_location():
    with pytest.raises(SchemaError) as exc:
        tile_from_dict({"label": "A", "phrase": "x" * 201}, key="needs", index=3)
    assert exc.value.kind is ErrorKind.SCHEMA
    assert (exc.value.key, exc.value.index, exc.value.field) == ("needs", 3, "phrase")


def test_image_reference():
    assert is_image_reference(PNG)
    assert not is_image_reference("https://example.com/cat.png")
    assert not is_image_reference(None)


def test_categories_roundtrip_keeps_order():
    raw = {
        "b": {"name": "B", "emoji": "🅱", "className": "cat-pain", "tiles": []},
        "a": {"tiles": [{"label": "Hi", "phrase": "Hello", "emoji": "👋"}]},
    }
    cats = categories_from_dict(raw)
    assert list(cats) == ["b", "a"]
    assert cats["a"] == Category(tiles=[EmojiTile("Hi", "Hello", "👋")])
    assert categories_to_dict(cats)["a"]["className"] == ""


def test_direction_step():
    assert Direction("up").step == -1
    assert Direction.DOWN.step == 1
