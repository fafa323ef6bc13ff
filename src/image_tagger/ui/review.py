"""
Terminal review interface for tagging sessions.

Renders the single-image panel, the paged grid, shortcut tables and commit
summaries with Rich, and translates raw key presses from the terminal.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import click
from PIL import Image
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from image_tagger.core.catalog import ImageEntry
from image_tagger.core.organizer import CommitResult
from image_tagger.core.session import ARROW_LEFT, ARROW_RIGHT, ViewerSession, ViewMode
from image_tagger.core.shortcuts import Action, ShortcutRegistry

logger = logging.getLogger(__name__)

ENTER = "Enter"
ESCAPE = "Escape"
TAB = "Tab"
BACKSPACE = "Backspace"
PAGE_DOWN = "PageDown"
PAGE_UP = "PageUp"

# Raw sequences from click.getchar() (POSIX escape codes and Windows scan codes)
KEY_SEQUENCES: Dict[str, str] = {
    "\x1b[C": ARROW_RIGHT,
    "\x1b[D": ARROW_LEFT,
    "\x1bOC": ARROW_RIGHT,
    "\x1bOD": ARROW_LEFT,
    "\xe0M": ARROW_RIGHT,
    "\xe0K": ARROW_LEFT,
    "\x00M": ARROW_RIGHT,
    "\x00K": ARROW_LEFT,
    "\x1b[6~": PAGE_DOWN,
    "\x1b[5~": PAGE_UP,
    "\xe0Q": PAGE_DOWN,
    "\xe0I": PAGE_UP,
    "\r": ENTER,
    "\n": ENTER,
    "\t": TAB,
    "\x1b": ESCAPE,
    "\x7f": BACKSPACE,
    "\x08": BACKSPACE,
}

ACTION_STYLES = {Action.MOVE: "cyan", Action.COPY: "green", Action.DELETE: "red"}


def translate_key(raw: str) -> str:
    """Map a raw terminal sequence to a key name; printable keys pass through."""
    return KEY_SEQUENCES.get(raw, raw)


def read_key() -> str:
    """Block until a key is pressed and return its name."""
    return translate_key(click.getchar())


class ImageMetadata:
    """File and pixel information shown next to an image."""

    def __init__(self, path: Path):
        """
        Initialize metadata for an image.

        Args:
            path: Path to the image file
        """
        self.path = path
        self.size_bytes = 0
        self.modified: Optional[datetime] = None
        self.width: Optional[int] = None
        self.height: Optional[int] = None
        self.format: Optional[str] = None

        try:
            stat = path.stat()
            self.size_bytes = stat.st_size
            self.modified = datetime.fromtimestamp(stat.st_mtime)
            with Image.open(path) as img:
                self.width, self.height = img.size
                self.format = img.format
        except Exception as e:
            logger.debug(f"Could not read image metadata for {path}: {e}")

    @property
    def size_mb(self) -> float:
        """File size in megabytes."""
        return self.size_bytes / (1024 * 1024)

    @property
    def resolution(self) -> Optional[str]:
        """Resolution as 'WIDTHxHEIGHT' or None."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None


class ReviewUI:
    """Terminal-based tagging interface using Rich."""

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize review UI.

        Args:
            console: Rich console instance (creates new one if None)
        """
        self.console = console or Console()

    def render_single(self, session: ViewerSession) -> Panel:
        """Panel describing the current image, its tag and load state."""
        entry = session.current()
        if entry is None:
            return Panel("[yellow]No images loaded[/yellow]", title="Viewer", box=box.ROUNDED)

        metadata = ImageMetadata(entry.path)
        shortcut = session.tags.get(entry.path)

        table = Table(show_header=False, box=None)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        table.add_row("File", entry.name)
        table.add_row("Resolution", metadata.resolution or "N/A")
        table.add_row("Size", f"{metadata.size_mb:.2f} MB")
        table.add_row(
            "Modified",
            metadata.modified.strftime("%Y-%m-%d") if metadata.modified else "N/A",
        )
        table.add_row(
            "Loaded",
            "[green]yes[/green]" if session.cache.contains(entry.path) else "[dim]loading[/dim]",
        )
        if shortcut is not None:
            style = ACTION_STYLES[shortcut.action]
            table.add_row(
                "Tag",
                f"[{style}]{shortcut.key} → {shortcut.folder} ({shortcut.action.value})[/{style}]",
            )
        else:
            table.add_row("Tag", "[dim]untagged[/dim]")

        return Panel(
            table,
            title=f"Image {session.index + 1}/{len(session.entries)}",
            subtitle=f"{len(session.tags)} tagged",
            box=box.DOUBLE,
        )

    def render_grid(
        self,
        session: ViewerSession,
        page: int = 0,
        columns: int = 4,
        rows: int = 3,
    ) -> Table:
        """One page of the catalog as a grid of file names with their tags."""
        page_size = columns * rows
        start = page * page_size
        cells = session.entries[start:start + page_size]
        pages = max(1, -(-len(session.entries) // page_size))

        table = Table(
            title=f"Page {page + 1}/{pages}",
            box=box.ROUNDED,
            show_header=False,
        )
        for _ in range(columns):
            table.add_column(justify="center")

        for row_start in range(0, len(cells), columns):
            row = []
            for offset, entry in enumerate(cells[row_start:row_start + columns]):
                row.append(self._grid_cell(session, start + row_start + offset, entry))
            row.extend([""] * (columns - len(row)))
            table.add_row(*row)

        return table

    def _grid_cell(self, session: ViewerSession, index: int, entry: ImageEntry) -> str:
        marker = "[bold]▶[/bold] " if index == session.index else ""
        loaded = "" if session.cache.contains(entry.path) else " [dim]…[/dim]"
        shortcut = session.tags.get(entry.path)
        if shortcut is None:
            return f"{marker}{entry.name}{loaded}"
        style = ACTION_STYLES[shortcut.action]
        return f"{marker}{entry.name}{loaded}\n[{style}]{shortcut.key} → {shortcut.folder}[/{style}]"

    def render_shortcuts(self, registry: ShortcutRegistry) -> Table:
        table = Table(title="Shortcuts", box=box.ROUNDED, header_style="bold magenta")
        table.add_column("Key", style="bold")
        table.add_column("Folder", style="cyan")
        table.add_column("Action", justify="center")
        for shortcut in registry:
            style = ACTION_STYLES[shortcut.action]
            table.add_row(shortcut.key, shortcut.folder, f"[{style}]{shortcut.action.value}[/{style}]")
        return table

    def render_catalog(self, entries: Sequence[ImageEntry]) -> Table:
        table = Table(title=f"{len(entries)} images", box=box.ROUNDED, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("File")
        table.add_column("Resolution", justify="right")
        table.add_column("Size", justify="right")
        for i, entry in enumerate(entries, 1):
            metadata = ImageMetadata(entry.path)
            table.add_row(
                str(i),
                entry.name,
                metadata.resolution or "N/A",
                f"{metadata.size_mb:.2f} MB",
            )
        return table

    def show_tag_summary(self, session: ViewerSession) -> None:
        """Print how many images each shortcut will receive before committing."""
        counts = session.tags.counts()
        base = session.config.get_output_path() or session.folder

        summary = Table(title="Pending Tags", box=box.ROUNDED)
        summary.add_column("Key", style="bold")
        summary.add_column("Destination", style="cyan")
        summary.add_column("Action", justify="center")
        summary.add_column("Images", justify="right", style="green")

        for key, count in counts.items():
            shortcut = session.registry.get(key)
            if shortcut is None:
                summary.add_row(key, "[dim]removed shortcut[/dim]", "skip", str(count))
                continue
            destination = "—" if shortcut.action == Action.DELETE else str(Path(base) / shortcut.folder)
            style = ACTION_STYLES[shortcut.action]
            summary.add_row(key, destination, f"[{style}]{shortcut.action.value}[/{style}]", str(count))

        self.console.print(summary)

    def show_commit_result(self, result: CommitResult) -> None:
        table = Table(title="Commit Summary", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Output folder", str(result.base_path))
        table.add_row("Moved", str(result.count(Action.MOVE)))
        table.add_row("Copied", str(result.count(Action.COPY)))
        table.add_row("Deleted", str(result.count(Action.DELETE)))
        if result.skipped:
            table.add_row("Skipped (shortcut removed)", f"[yellow]{len(result.skipped)}[/yellow]")
        self.console.print(table)

    def show_help(self, session: ViewerSession) -> None:
        controls: List[str] = ["←/→ navigate", "Tab grid/single", "Enter commit", "Backspace untag"]
        if "q" not in session.registry:
            controls.append("q quit")
        controls.append("Esc quit")
        if session.view_mode == ViewMode.GRID:
            controls.append("PgUp/PgDn page")
        self.console.print(f"[dim]Controls: {', '.join(controls)}[/dim]")
