"""Viewing session: catalog, cache and tags for the open folder plus key handling."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from image_tagger.core.cache import GridLoader, ImageCache, VisibilitySource
from image_tagger.core.catalog import ImageCatalog, ImageEntry
from image_tagger.core.errors import Busy, NothingToCommit
from image_tagger.core.organizer import BatchOrganizer, CommitResult
from image_tagger.core.shortcuts import Shortcut, ShortcutRegistry
from image_tagger.core.tags import TagStore
from image_tagger.utils.config import Config
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)

ARROW_RIGHT = "ArrowRight"
ARROW_LEFT = "ArrowLeft"


class ViewMode(str, Enum):
    SINGLE = "single"
    GRID = "grid"


class Page(str, Enum):
    MAIN = "main"
    SETTINGS = "settings"


class ViewerSession:
    """
    State of one review session.

    Opening a folder replaces the catalog and resets the tags, the image
    cache and the current index together. A commit drains the tags through
    the batch organizer and then re-scans the folder.
    """

    def __init__(
        self,
        config: Config,
        registry: Optional[ShortcutRegistry] = None,
        cache: Optional[ImageCache] = None,
        organizer: Optional[BatchOrganizer] = None,
        show_progress: bool = False,
    ):
        """
        Initialize the session.

        Args:
            config: Configuration instance (output path and tuning)
            registry: Shortcut registry (default: loaded from config)
            cache: Image cache (default: sized from ``cache.*`` settings)
            organizer: Batch organizer (default: built from ``safety.*`` settings)
            show_progress: Show a progress bar while committing
        """
        self.config = config
        self.registry = registry or ShortcutRegistry(config)
        self.cache = cache or ImageCache(
            max_entries=config.get("cache.max_entries", 256),
            preload_workers=config.get("cache.preload_workers", 3),
        )
        self.organizer = organizer or BatchOrganizer(
            self.registry,
            use_recycle_bin=config.get("safety.use_recycle_bin", False),
            show_progress=show_progress,
            operations_log=config.get_operations_log(),
        )
        self.catalog = ImageCatalog()
        self.tags = TagStore(self.registry)
        self.index = 0
        self.view_mode = ViewMode.SINGLE
        self.page = Page.MAIN
        self.processing = False
        self.grid_loader: Optional[GridLoader] = None

    @property
    def folder(self) -> Optional[Path]:
        return self.catalog.folder

    @property
    def entries(self) -> List[ImageEntry]:
        return self.catalog.entries

    def current(self) -> Optional[ImageEntry]:
        if not self.catalog.entries:
            return None
        return self.catalog[self.index]

    def open_folder(self, folder: Path) -> List[ImageEntry]:
        """
        Scan a folder and start a fresh session on it.

        Raises:
            Busy: While a commit is running
            ScanError, EmptyCatalog: From the scan; the previous state is kept
        """
        if self.processing:
            raise Busy("Cannot open a folder while a commit is running")

        entries = self.catalog.scan(folder)
        self.cache.clear()
        self.tags.clear()
        self.grid_loader = None
        self.index = 0
        self._preload()
        return entries

    def set_view_mode(self, mode: ViewMode) -> None:
        self.view_mode = ViewMode(mode)
        self._preload()

    def toggle_view_mode(self) -> ViewMode:
        self.set_view_mode(ViewMode.GRID if self.view_mode == ViewMode.SINGLE else ViewMode.SINGLE)
        return self.view_mode

    def set_page(self, page: Page) -> None:
        self.page = Page(page)

    def attach_grid(self, visibility: VisibilitySource) -> GridLoader:
        """Register the catalog with a visibility source for lazy grid loading."""
        self.grid_loader = GridLoader(self.cache, visibility)
        self.grid_loader.attach(self.catalog.entries)
        return self.grid_loader

    def next_image(self) -> None:
        if self.catalog.entries:
            self.go_to((self.index + 1) % len(self.catalog))

    def prev_image(self) -> None:
        if self.catalog.entries:
            n = len(self.catalog)
            self.go_to((self.index - 1 + n) % n)

    def go_to(self, index: int) -> None:
        if not 0 <= index < len(self.catalog):
            raise IndexError(f"Image index out of range: {index}")
        self.index = index
        self._preload()

    def handle_key(self, key: str) -> Optional[Shortcut]:
        """
        Dispatch a key press in the viewer.

        Only the main page in single view reacts, and only when images are
        loaded. Arrow keys navigate circularly; any other single character
        tags the current image if a shortcut is bound to it.

        Returns:
            The shortcut applied by a tagging key, else None
        """
        if self.page != Page.MAIN or self.view_mode != ViewMode.SINGLE:
            return None
        if not self.catalog.entries:
            return None

        if key == ARROW_RIGHT:
            self.next_image()
        elif key == ARROW_LEFT:
            self.prev_image()
        elif len(key) == 1:
            return self.tags.tag(self.catalog[self.index].path, key.lower())
        return None

    def commit(self) -> CommitResult:
        """
        Apply every tag, then clear tags, re-scan and return to the first image.

        On failure the tags and catalog are left as they were (files already
        processed stay processed).

        Raises:
            Busy: If a commit is already running
            NothingToCommit, CommitStepFailure: From the organizer
            ScanError: If the folder cannot be re-scanned after a successful
                commit (the files are already processed and the tags cleared)
        """
        if self.processing:
            raise Busy("A commit is already running")
        if not len(self.tags) or self.catalog.folder is None:
            raise NothingToCommit()

        self.processing = True
        try:
            result = self.organizer.commit(
                self.tags.snapshot(),
                source_folder=self.catalog.folder,
                output_path=self.config.get_output_path(),
            )
            self.tags.clear()
            self.cache.clear()
            self.grid_loader = None
            self.index = 0
            self.catalog.refresh()
            self._preload()
            return result
        finally:
            self.processing = False

    def close(self) -> None:
        self.cache.shutdown(wait=False)

    def _preload(self) -> None:
        if self.view_mode == ViewMode.SINGLE:
            self.cache.preload_neighbors(self.catalog.entries, self.index)
