"""Built-in board content and the palettes offered when editing it."""

from __future__ import annotations

from dataclasses import dataclass

from .state.models import Category, EmojiTile


@dataclass(frozen=True)
class CategoryColor:
    name: str
    background: str
    class_name: str


CATEGORY_COLORS: tuple[CategoryColor, ...] = (
    CategoryColor("Blue", "#1a5276", "cat-needs"),
    CategoryColor("Red", "#7b241c", "cat-pain"),
    CategoryColor("Green", "#1e8449", "cat-feelings"),
    CategoryColor("Purple", "#6c3483", "cat-people"),
    CategoryColor("Gold", "#b9770e", "cat-actions"),
    CategoryColor("Teal", "#117a65", "cat-comfort"),
    CategoryColor("Navy", "#1b2631", "cat-custom1"),
    CategoryColor("Brown", "#6e2c00", "cat-custom2"),
    CategoryColor("Slate", "#2c3e50", "cat-custom3"),
    CategoryColor("Dark Green", "#0b5345", "cat-custom4"),
)

EMOJI_GROUPS: dict[str, tuple[str, ...]] = {
    "Faces": (
        "😊", "😢", "😟", "😠", "😴", "😰",
        "🥰", "😔", "😤", "😌", "🥱", "🤗",
    ),
    "Hands & Body": (
        "👍", "👎", "👋", "🤝", "🙏", "✋",
        "💪", "👁", "👂", "🧠", "❤️",
    ),
    "People": (
        "👩‍⚕️", "🧑‍⚕️", "👨‍👩‍👧", "👦", "👧",
        "👩", "👨", "👴", "👵", "👤",
    ),
    "Medical": ("💊", "🩹", "🩺", "🏥", "💉", "🌡", "♿", "🚑"),
    "Objects": (
        "💧", "📱", "👓", "📺", "📞", "💡",
        "🪑", "🛏", "🚪", "🛑", "⏳", "🔁",
    ),
    "Food & Drink": ("🍽", "☕", "🧊", "🥤", "🍎", "🍌", "🥣", "🍞"),
    "Comfort & Hygiene": ("🛋", "🧣", "🧴", "🪥", "🚿", "👕", "🧼", "🛁"),
    "Symbols": ("🆘", "🔊", "⭐", "✅", "❌", "⚠️", "🔄", "🏠"),
}


def style_classes() -> list[str]:
    return [color.class_name for color in CATEGORY_COLORS]


def default_categories() -> dict[str, Category]:
    """A fresh copy of the board the application ships with."""

    return {
        "needs": Category(
            name="Needs",
            emoji="💧",
            class_name="cat-needs",
            tiles=[
                EmojiTile("Water", "I need some water please", "💧"),
                EmojiTile("Toilet", "I need to use the toilet", "🚻"),
                EmojiTile("Food", "I am hungry", "🍽"),
                EmojiTile("Rest", "I want to lie down", "🛏"),
                EmojiTile("Glasses", "Please bring my glasses", "👓"),
            ],
        ),
        "pain": Category(
            name="Pain",
            emoji="🤕",
            class_name="cat-pain",
            tiles=[
                EmojiTile("Hurts", "Something hurts", "🤕"),
                EmojiTile("Head", "My head hurts", "🧠"),
                EmojiTile("Medicine", "I need my medicine", "💊"),
                EmojiTile("Nurse", "Please call the nurse", "👩‍⚕️"),
            ],
        ),
        "feelings": Category(
            name="Feelings",
            emoji="😊",
            class_name="cat-feelings",
            tiles=[
                EmojiTile("Happy", "I feel happy", "😊"),
                EmojiTile("Sad", "I feel sad", "😢"),
                EmojiTile("Tired", "I am tired", "🥱"),
                EmojiTile("Scared", "I feel scared", "😰"),
            ],
        ),
        "people": Category(
            name="People",
            emoji="👨‍👩‍👧",
            class_name="cat-people",
            tiles=[
                EmojiTile("Family", "I want to see my family", "👨‍👩‍👧"),
                EmojiTile("Doctor", "I want to talk to the doctor", "🧑‍⚕️"),
                EmojiTile("Phone", "Please call my family", "📞"),
            ],
        ),
        "comfort": Category(
            name="Comfort",
            emoji="🛋",
            class_name="cat-comfort",
            tiles=[
                EmojiTile("Cold", "I am cold", "🧣"),
                EmojiTile("Hot", "I am too hot", "🥵"),
                EmojiTile("Light", "Please turn off the light", "💡"),
                EmojiTile("Quiet", "I need some quiet", "🔇"),
            ],
        ),
    }
