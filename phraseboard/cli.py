from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from . import metrics
from .app import Board, open_board
from .config import Settings
from .errors import BoardError
from .logging import configure_logging
from .metrics import categories_count, favorites_count, recents_depth
from .state.models import Direction
from .state.recents import short_label

app = typer.Typer(help="Phrase board store utility")

category_app = typer.Typer(help="Edit categories")
tile_app = typer.Typer(help="Edit the tiles of a category")
recents_app = typer.Typer(help="Recently spoken phrases")
favorites_app = typer.Typer(help="Favorite phrases")
app.add_typer(category_app, name="category")
app.add_typer(tile_app, name="tile")
app.add_typer(recents_app, name="recents")
app.add_typer(favorites_app, name="favorites")


@app.callback()
def main(
    ctx: typer.Context,
    storage_dir: Path | None = typer.Option(None, help="Directory holding the stores"),
    memory: bool = typer.Option(False, help="Use a throwaway in-memory backend"),
    verbose: bool = typer.Option(False, help="Print effective settings"),
) -> None:
    """Inspect and edit a phrase board's persisted state."""
    overrides: dict[str, object] = {}
    if storage_dir is not None:
        overrides["storage_dir"] = storage_dir
    if memory:
        overrides["storage_backend"] = "memory"
    settings = Settings(**overrides)
    configure_logging(settings.log_level or ("INFO" if verbose else "WARNING"))
    if verbose:
        typer.echo(settings.model_dump_json(indent=2))
    ctx.obj = settings


def _board(ctx: typer.Context) -> Board:
    return open_board(ctx.obj)


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except BoardError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _confirm(yes: bool, message: str) -> None:
    if not yes:
        typer.confirm(message, abort=True)


# Categories ------------------------------------------------------------------


@app.command("categories")
def list_categories(ctx: typer.Context) -> None:
    """List categories in display order."""
    store = _board(ctx).categories
    for key in store.list_category_keys():
        count = len(store.live[key].tiles)
        typer.echo(
            f"{key}\t{store.get_display_emoji(key)} {store.get_display_name(key)} ({count} tiles)"
        )


@category_app.command("add")
def category_add(
    ctx: typer.Context,
    name: str,
    emoji: str | None = typer.Option(None, help="Display emoji"),
    style: str | None = typer.Option(None, help="Color/style class"),
) -> None:
    with _reporting_errors():
        key = _board(ctx).categories.add_category(name, emoji, style)
    typer.echo(key)


@category_app.command("edit")
def category_edit(
    ctx: typer.Context,
    key: str,
    name: str,
    emoji: str | None = typer.Option(None, help="Display emoji"),
    style: str | None = typer.Option(None, help="Color/style class"),
) -> None:
    with _reporting_errors():
        _board(ctx).categories.edit_category(key, name, emoji, style)


@category_app.command("delete")
def category_delete(
    ctx: typer.Context,
    key: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a category and all its tiles."""
    board = _board(ctx)
    with _reporting_errors():
        name = board.categories.get_display_name(key)
        board.categories.get_category(key)
        _confirm(yes, f'Delete category "{name}" and all its tiles?')
        board.categories.delete_category(key)
    typer.echo(f'Deleted "{name}"')


@category_app.command("move")
def category_move(ctx: typer.Context, key: str, direction: Direction) -> None:
    with _reporting_errors():
        moved = _board(ctx).categories.move_category(key, direction)
    if not moved:
        typer.echo("Already at the edge")


# Tiles -----------------------------------------------------------------------


@tile_app.command("list")
def tile_list(ctx: typer.Context, key: str) -> None:
    with _reporting_errors():
        cat = _board(ctx).categories.get_category(key)
    for idx, tile in enumerate(cat.tiles):
        typer.echo(f"{idx}\t{tile.glyph} {tile.label}: {tile.phrase}")


@tile_app.command("add")
def tile_add(
    ctx: typer.Context,
    key: str,
    label: str,
    phrase: str,
    emoji: str | None = typer.Option(None, help="Emoji glyph"),
    image: str | None = typer.Option(None, help="Base64 data:image URL"),
) -> None:
    with _reporting_errors():
        index = _board(ctx).categories.add_tile(key, label, phrase, emoji=emoji, image=image)
    typer.echo(str(index))


@tile_app.command("edit")
def tile_edit(
    ctx: typer.Context,
    key: str,
    index: int,
    label: str | None = typer.Option(None),
    phrase: str | None = typer.Option(None),
    emoji: str | None = typer.Option(None, help="Switch to (or change) an emoji"),
    image: str | None = typer.Option(None, help="Replace an image tile's data URL"),
) -> None:
    with _reporting_errors():
        _board(ctx).categories.edit_tile(
            key, index, label=label, phrase=phrase, emoji=emoji, image=image
        )


@tile_app.command("delete")
def tile_delete(
    ctx: typer.Context,
    key: str,
    index: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    board = _board(ctx)
    with _reporting_errors():
        tile = board.categories.get_tile(key, index)
        _confirm(yes, f'Delete tile "{tile.label}"?')
        board.categories.delete_tile(key, index)
    typer.echo(f'Deleted "{tile.label}"')


@tile_app.command("move")
def tile_move(ctx: typer.Context, key: str, index: int, direction: Direction) -> None:
    with _reporting_errors():
        moved = _board(ctx).categories.move_tile(key, index, direction)
    if not moved:
        typer.echo("Already at the edge")


# Transfer --------------------------------------------------------------------


@app.command("export")
def export_config(
    ctx: typer.Context,
    output: Path | None = typer.Option(None, help="Write to a file instead of stdout"),
) -> None:
    """Export all categories and tiles as JSON."""
    text = _board(ctx).categories.export_configuration()
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


@app.command("import")
def import_config(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Replace all categories and tiles with an exported configuration."""
    _confirm(yes, "This will replace all current categories and tiles. Continue?")
    with _reporting_errors():
        _board(ctx).categories.import_configuration(path.read_text(encoding="utf-8"))
    typer.echo("Configuration imported")


@app.command("reset")
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Restore the built-in categories and drop all customizations."""
    _confirm(yes, "Reset ALL customizations? This cannot be undone.")
    _board(ctx).categories.reset_to_defaults()
    typer.echo("Reset to defaults")


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Print store sizes and storage counters for this process."""
    board = _board(ctx)
    categories_count.set(len(board.live))
    recents_depth.set(len(board.recents))
    favorites_count.set(board.favorites.count())
    typer.echo(json.dumps(metrics.snapshot(), indent=2))


# Recents ---------------------------------------------------------------------


@recents_app.command("list")
def recents_list(ctx: typer.Context) -> None:
    for view in _board(ctx).recents.views():
        typer.echo(f"{view.age}\t{view.emoji} {view.label}\t{view.phrase}")


@recents_app.command("record")
def recents_record(
    ctx: typer.Context,
    phrase: str,
    emoji: str = typer.Option("", help="Emoji shown on the recent tile"),
    category: str = typer.Option("", help="Category the phrase came from"),
) -> None:
    _board(ctx).recents.record(phrase, emoji, category)


@recents_app.command("clear")
def recents_clear(ctx: typer.Context) -> None:
    _board(ctx).recents.clear()


# Favorites -------------------------------------------------------------------


@favorites_app.command("list")
def favorites_list(ctx: typer.Context) -> None:
    for fav in _board(ctx).favorites.get_all():
        typer.echo(f"{fav.emoji} {fav.label}\t{fav.phrase}")


@favorites_app.command("add")
def favorites_add(
    ctx: typer.Context,
    phrase: str,
    emoji: str = typer.Option("", help="Display emoji"),
    label: str | None = typer.Option(None, help="Short label (defaults to a derived one)"),
) -> None:
    added = _board(ctx).favorites.add(phrase, emoji, label or short_label(phrase))
    typer.echo("Added to favorites" if added else "Already a favorite")


@favorites_app.command("remove")
def favorites_remove(
    ctx: typer.Context,
    phrase: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    pending = _board(ctx).favorites.request_removal(phrase)
    if yes or typer.confirm(f"Remove {pending.display_label} from favorites?"):
        removed = pending.confirm()
    else:
        pending.cancel()
        removed = False
    typer.echo("Removed from favorites" if removed else "Nothing removed")


@favorites_app.command("toggle")
def favorites_toggle(ctx: typer.Context, phrase: str, emoji: str = typer.Option("")) -> None:
    now_favorite = _board(ctx).favorites.toggle(phrase, emoji, short_label(phrase))
    typer.echo("Added to favorites" if now_favorite else "Removed from favorites")


@favorites_app.command("save")
def favorites_save(
    ctx: typer.Context, phrase: str, emoji: str | None = typer.Option(None)
) -> None:
    """Save a composed phrase as a favorite."""
    saved = _board(ctx).favorites.save_phrase(phrase, emoji)
    typer.echo("Saved" if saved else "Not saved")


@favorites_app.command("export")
def favorites_export(ctx: typer.Context) -> None:
    typer.echo(_board(ctx).favorites.export_json())


@favorites_app.command("import")
def favorites_import(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
) -> None:
    added = _board(ctx).favorites.import_json(path.read_text(encoding="utf-8"))
    typer.echo(f"Imported {added} favorites")


if __name__ == "__main__":  # pragma: no cover
    app()
