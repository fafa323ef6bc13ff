"""Command-line interface for image-tagger."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from image_tagger import __version__
from image_tagger.core.cache import PagedVisibility
from image_tagger.core.catalog import ImageCatalog
from image_tagger.core.errors import (
    Busy,
    CommitStepFailure,
    DuplicateKey,
    EmptyCatalog,
    InvalidAction,
    InvalidOutputPath,
    NothingToCommit,
    ScanError,
)
from image_tagger.core.session import ViewerSession, ViewMode
from image_tagger.core.shortcuts import ShortcutRegistry
from image_tagger.ui.review import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    PAGE_DOWN,
    PAGE_UP,
    TAB,
    ReviewUI,
    read_key,
)
from image_tagger.utils.config import Config
from image_tagger.utils.logger import set_level, setup_logger

console = Console()
logger = setup_logger(__name__)

ACTIONS = ["move", "copy", "delete"]


@click.group()
@click.version_option(version=__version__, prog_name="image-tagger")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file to use (default: remembered location or ~/.image-tagger/config.json)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Optional[Path]) -> None:
    """
    Image Tagger - Review a folder of images and sort them with single-key tags.

    Bind keys to destination folders and actions, tag images while browsing,
    then commit every tag in one batch.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file

    if verbose:
        set_level(logging.DEBUG)


def _load_config(ctx: click.Context) -> Config:
    return Config(ctx.obj.get("config_file"))


# --------------------------------------------------------------------------- shortcuts


@cli.group()
def shortcuts() -> None:
    """Manage key bindings (key -> folder + action)."""


@shortcuts.command(name="list")
@click.pass_context
def list_shortcuts(ctx: click.Context) -> None:
    """List configured shortcuts."""
    registry = ShortcutRegistry(_load_config(ctx))

    if not len(registry):
        console.print("[yellow]No shortcuts configured.[/yellow]")
        console.print("[dim]Add one with: image-tagger shortcuts add KEY FOLDER --action move[/dim]")
        return

    console.print(ReviewUI(console).render_shortcuts(registry))


@shortcuts.command(name="add")
@click.argument("key")
@click.argument("folder")
@click.option(
    "--action",
    "-a",
    type=click.Choice(ACTIONS, case_sensitive=False),
    default="move",
    show_default=True,
    help="What a commit does with images tagged by this key",
)
@click.pass_context
def add_shortcut(ctx: click.Context, key: str, folder: str, action: str) -> None:
    """
    Bind KEY to FOLDER.

    FOLDER is created under the output path (or the reviewed folder) on commit.

    Example:
        image-tagger shortcuts add d dogs --action move
    """
    registry = ShortcutRegistry(_load_config(ctx))

    try:
        shortcut = registry.add(key, folder, action)
    except DuplicateKey as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except (InvalidAction, ValueError) as e:
        console.print(f"[red]✗ Invalid shortcut:[/red] {e}")
        sys.exit(1)

    console.print(
        f"[green]✓ Shortcut added:[/green] {shortcut.key} → {shortcut.folder} ({shortcut.action.value})"
    )


@shortcuts.command(name="remove")
@click.argument("key")
@click.pass_context
def remove_shortcut(ctx: click.Context, key: str) -> None:
    """Remove the binding for KEY."""
    registry = ShortcutRegistry(_load_config(ctx))

    if registry.remove(key):
        console.print(f"[green]✓ Shortcut removed:[/green] {key.lower()}")
    else:
        console.print(f"[yellow]No shortcut bound to {key.lower()!r}.[/yellow]")


# --------------------------------------------------------------------------- output path


@cli.group()
def output() -> None:
    """Manage the default output folder."""


@output.command(name="show")
@click.pass_context
def show_output(ctx: click.Context) -> None:
    """Show the output folder used by commits."""
    path = _load_config(ctx).get_output_path()
    if path:
        console.print(f"[cyan]Output path:[/cyan] {path}")
    else:
        console.print("[dim]Output path not set: images are organized inside the reviewed folder.[/dim]")


@output.command(name="set")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def set_output(ctx: click.Context, path: Path) -> None:
    """Organize images into subfolders of PATH instead of the reviewed folder."""
    config = _load_config(ctx)
    try:
        config.set_output_path(path)
    except InvalidOutputPath as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Output path set:[/green] {config.get_output_path()}")


@output.command(name="clear")
@click.pass_context
def clear_output(ctx: click.Context) -> None:
    """Go back to organizing inside the reviewed folder."""
    _load_config(ctx).set_output_path(None)
    console.print("[green]✓ Output path cleared[/green]")


# --------------------------------------------------------------------------- settings file


@cli.group()
def settings() -> None:
    """Show or switch the settings file."""


@settings.command(name="show")
@click.pass_context
def show_settings(ctx: click.Context) -> None:
    """Show the active settings file and its contents."""
    config = _load_config(ctx)

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Settings file", str(config.config_file))
    table.add_row("Output path", str(config.get_output_path() or "(reviewed folder)"))
    table.add_row("Shortcuts", str(len(config.get_shortcut_records())))
    table.add_row("Cache entries", str(config.get("cache.max_entries")))
    table.add_row("Recycle bin", str(config.get("safety.use_recycle_bin")))
    console.print(table)


@settings.command(name="use")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def use_settings(ctx: click.Context, path: Path) -> None:
    """
    Switch to the settings file PATH (created if missing) for this and later runs.

    Example:
        image-tagger settings use ~/Dropbox/image-tagger.json
    """
    config = _load_config(ctx)
    config.switch_location(path.expanduser().resolve(), remember=True)
    console.print(f"[green]✓ Switched to:[/green] {config.config_file}")
    console.print(f"[dim]{len(config.get_shortcut_records())} shortcuts loaded[/dim]")


# --------------------------------------------------------------------------- folders


@cli.command()
@click.argument(
    "folder", type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path)
)
def scan(folder: Path) -> None:
    """List the images of FOLDER in review order."""
    catalog = ImageCatalog()
    try:
        entries = catalog.scan(folder)
    except EmptyCatalog as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    except ScanError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    console.print(ReviewUI(console).render_catalog(entries))


@cli.command()
@click.argument(
    "folder", type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path)
)
@click.option("--grid", is_flag=True, help="Start in grid view")
@click.pass_context
def review(ctx: click.Context, folder: Path, grid: bool) -> None:
    """
    Interactively review FOLDER and tag images with shortcut keys.

    ←/→ move between images, a shortcut key tags the current image, Tab
    toggles grid view, Enter commits all tags, Esc quits.

    Example:
        image-tagger review ~/Pictures/inbox
    """
    config = _load_config(ctx)
    session = ViewerSession(config, show_progress=True)
    ui = ReviewUI(console)

    if not _open(session, folder):
        return

    if not len(session.registry):
        console.print("[yellow]No shortcuts configured; add some with 'image-tagger shortcuts add'.[/yellow]")

    columns = config.get("ui.grid_columns", 4)
    rows = config.get("ui.grid_rows", 3)
    visibility = _attach_grid(session, config)
    grid_page = 0
    if grid:
        session.set_view_mode(ViewMode.GRID)

    try:
        while True:
            console.clear()
            if session.view_mode == ViewMode.SINGLE:
                console.print(ui.render_single(session))
            else:
                visibility.show_page(grid_page)
                console.print(ui.render_grid(session, grid_page, columns, rows))
            ui.show_help(session)

            key = read_key()
            if key == ESCAPE or (key == "q" and "q" not in session.registry):
                break
            if key == TAB:
                session.toggle_view_mode()
                if session.view_mode == ViewMode.SINGLE:
                    visibility.hide()
                grid_page = session.index // visibility.page_size
            elif key == ENTER:
                if _commit(session, ui, confirm=True):
                    if not session.entries:
                        console.print("[green]All images organized.[/green]")
                        break
                    visibility = _attach_grid(session, config)
                    grid_page = 0
                click.pause()
            elif key == BACKSPACE:
                entry = session.current()
                if entry is not None and session.view_mode == ViewMode.SINGLE:
                    session.tags.untag(entry.path)
            elif key in (PAGE_DOWN, PAGE_UP) and session.view_mode == ViewMode.GRID:
                pages = max(1, -(-len(session.entries) // visibility.page_size))
                step = 1 if key == PAGE_DOWN else -1
                grid_page = (grid_page + step) % pages
            else:
                session.handle_key(key)
    finally:
        session.close()

    if len(session.tags):
        console.print(f"[yellow]{len(session.tags)} tagged images were not committed.[/yellow]")


@cli.command()
@click.argument(
    "folder", type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path)
)
@click.option(
    "--tag",
    "-t",
    "tag_specs",
    multiple=True,
    required=True,
    help="NAME=KEY: tag image NAME with shortcut KEY (repeatable)",
)
@click.option("--yes", "-y", is_flag=True, help="Commit without asking for confirmation")
@click.option(
    "--show-progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.pass_context
def organize(
    ctx: click.Context,
    folder: Path,
    tag_specs: Tuple[str, ...],
    yes: bool,
    show_progress: bool,
) -> None:
    """
    Tag images of FOLDER from the command line and commit in one batch.

    Example:
        image-tagger organize ~/Pictures/inbox -t a.jpg=d -t b.png=x --yes
    """
    config = _load_config(ctx)
    session = ViewerSession(config, show_progress=show_progress)

    try:
        if not _open(session, folder):
            return

        for spec in tag_specs:
            name, sep, key = spec.rpartition("=")
            if not sep or not name or len(key) != 1:
                console.print(f"[red]✗ Invalid tag {spec!r} (expected NAME=KEY)[/red]")
                sys.exit(1)

            index = next((i for i, e in enumerate(session.entries) if e.name == name), -1)
            if index < 0:
                console.print(f"[yellow]Not in catalog, skipping:[/yellow] {name}")
                continue

            session.go_to(index)
            if session.handle_key(key) is None:
                console.print(f"[yellow]No shortcut bound to {key!r}, skipping:[/yellow] {name}")

        if not _commit(session, ReviewUI(console), confirm=not yes):
            sys.exit(1)
    finally:
        session.close()


def _open(session: ViewerSession, folder: Path) -> bool:
    try:
        entries = session.open_folder(folder)
    except EmptyCatalog as e:
        console.print(f"[yellow]{e}[/yellow]")
        return False
    except ScanError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    logger.debug(f"Opened {folder} with {len(entries)} images")
    return True


def _attach_grid(session: ViewerSession, config: Config) -> PagedVisibility:
    visibility = PagedVisibility(
        columns=config.get("ui.grid_columns", 4),
        rows=config.get("ui.grid_rows", 3),
        margin_rows=config.get("cache.grid_margin_rows", 1),
    )
    session.attach_grid(visibility)
    return visibility


def _commit(session: ViewerSession, ui: ReviewUI, confirm: bool) -> bool:
    """Commit the session's tags, reporting the outcome. Returns True on success."""
    if not len(session.tags):
        console.print("[yellow]No images tagged.[/yellow]")
        return False

    ui.show_tag_summary(session)
    if confirm and not click.confirm("\nApply these tags?", default=True):
        console.print("[yellow]Commit cancelled. Tags kept.[/yellow]")
        return False

    try:
        result = session.commit()
    except NothingToCommit as e:
        console.print(f"[yellow]{e}.[/yellow]")
        return False
    except CommitStepFailure as e:
        console.print(f"[red]✗ Error processing images:[/red] {e}")
        console.print(
            f"[dim]{len(e.completed)} images were processed before the failure and stay "
            f"where they are; the remaining tags are kept.[/dim]"
        )
        return False
    except Busy as e:
        console.print(f"[red]✗ {e}[/red]")
        return False
    except ScanError as e:
        console.print(f"[red]✗ Images were processed but the folder could not be re-scanned:[/red] {e}")
        sys.exit(1)

    ui.show_commit_result(result)
    console.print("[bold green]✓ Images processed successfully![/bold green]")
    return True


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
