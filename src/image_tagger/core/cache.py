"""
Image cache that turns image files into self-contained data URIs.

Entries are decoded on demand: around the active index in single view, and
as cells become visible in grid view. The map is a bounded LRU so long
sessions over large folders do not grow without limit.
"""

import base64
import threading
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Set

from image_tagger.core.catalog import ImageEntry
from image_tagger.core.errors import DecodeError
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)

MEDIA_TYPES: Dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "webp": "image/webp",
}
DEFAULT_MEDIA_TYPE = "image/jpeg"


def media_type_for(path: Path) -> str:
    """Media type inferred from the file extension (JPEG when unknown)."""
    return MEDIA_TYPES.get(Path(path).suffix.lower().lstrip("."), DEFAULT_MEDIA_TYPE)


@dataclass(frozen=True)
class CachedImage:
    """Decoded display payload for one image."""

    path: Path
    media_type: str
    data_uri: str


class ImageCache:
    """Path -> data URI cache with LRU eviction."""

    def __init__(
        self,
        max_entries: int = 256,
        reader: Optional[Callable[[Path], bytes]] = None,
        preload_workers: int = 3,
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Entries kept before the least recently used is
                evicted; 0 keeps everything for the session
            reader: Function returning a file's bytes (default: Path.read_bytes)
            preload_workers: Threads used for neighbor and grid preloading
        """
        self.max_entries = max_entries
        self.reader = reader or (lambda path: Path(path).read_bytes())
        self.preload_workers = max(1, preload_workers)
        self._entries: "OrderedDict[Path, CachedImage]" = OrderedDict()
        self._lock = threading.Lock()
        self._generation = 0
        self._executor: Optional[ThreadPoolExecutor] = None

    def get(self, path: Path, generation: Optional[int] = None) -> Optional[str]:
        """
        Return the data URI for an image, decoding it on first use.

        Read failures are logged and return None; nothing is cached for them,
        so a later call tries again.
        """
        try:
            return self.load(path, generation).data_uri
        except DecodeError as e:
            logger.warning(str(e))
            return None

    def load(self, path: Path, generation: Optional[int] = None) -> CachedImage:
        """
        Return the cached image, reading the file only on a miss.

        ``generation`` pins the request to the catalog current when it was
        queued; if the cache has been cleared since, the result is not stored.

        Raises:
            DecodeError: If the file cannot be read
        """
        path = Path(path)
        with self._lock:
            cached = self._entries.get(path)
            if cached is not None:
                self._entries.move_to_end(path)
                return cached
            if generation is None:
                generation = self._generation

        try:
            raw = self.reader(path)
        except OSError as e:
            raise DecodeError(path, f"Error loading image {path}: {e}") from e

        media_type = media_type_for(path)
        encoded = base64.b64encode(raw).decode("ascii")
        image = CachedImage(
            path=path,
            media_type=media_type,
            data_uri=f"data:{media_type};base64,{encoded}",
        )

        with self._lock:
            # Another worker may have decoded the same path meanwhile; keep the first
            existing = self._entries.get(path)
            if existing is not None:
                return existing
            if generation != self._generation:
                # Cleared while reading: the image belongs to a previous catalog
                return image
            self._entries[path] = image
            self._evict_locked()
        logger.debug(f"Cached {path.name} ({media_type}, {len(raw)} bytes)")
        return image

    def contains(self, path: Path) -> bool:
        with self._lock:
            return Path(path) in self._entries

    def clear(self) -> None:
        """Drop every entry (a new folder was opened)."""
        with self._lock:
            self._entries.clear()
            self._generation += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_locked(self) -> None:
        if self.max_entries <= 0:
            return
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted.name} from image cache")

    def submit(self, path: Path) -> "Future[Optional[str]]":
        """Decode a path on the preload pool without blocking the caller."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.preload_workers, thread_name_prefix="image-preload"
            )
        with self._lock:
            generation = self._generation
        return self._executor.submit(self.get, path, generation)

    def preload_neighbors(
        self, entries: Sequence[ImageEntry], index: int
    ) -> List["Future[Optional[str]]"]:
        """
        Start decoding the current image and its immediate neighbors.

        The fetches are independent: a slow or failing one does not hold up
        the others. No wrap-around at the ends of the catalog.
        """
        if not entries or not 0 <= index < len(entries):
            return []
        indices = [index]
        if index + 1 < len(entries):
            indices.append(index + 1)
        if index > 0:
            indices.append(index - 1)
        return [self.submit(entries[i].path) for i in indices]

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None


class VisibilitySource(Protocol):
    """Presentation-layer signal reporting when a grid cell becomes visible."""

    def on_becomes_visible(self, item_id: int, callback: Callable[[], None]) -> None:
        ...


class GridLoader:
    """
    Decodes grid cells only once the presentation layer reports them visible.

    A cell is decoded again when it comes back into view after being evicted
    or after a failed read.
    """

    def __init__(self, cache: ImageCache, visibility: VisibilitySource):
        self.cache = cache
        self.visibility = visibility
        self.pending: Set[Path] = set()

    def attach(self, entries: Sequence[ImageEntry]) -> None:
        """Register every cell of the grid with the visibility source."""
        for item_id, entry in enumerate(entries):
            self.visibility.on_becomes_visible(item_id, self._loader_for(entry.path))

    def _loader_for(self, path: Path) -> Callable[[], None]:
        def load() -> None:
            if path in self.pending or self.cache.contains(path):
                return
            self.pending.add(path)
            future = self.cache.submit(path)
            future.add_done_callback(lambda _: self.pending.discard(path))

        return load


class PagedVisibility:
    """
    Visibility source for a paged terminal grid.

    The rows of the page being shown, plus ``margin_rows`` rows after it,
    count as visible. A callback fires each time its item enters view;
    showing the same page twice fires nothing the second time.
    """

    def __init__(self, columns: int, rows: int, margin_rows: int = 1):
        self.columns = max(1, columns)
        self.rows = max(1, rows)
        self.margin_rows = max(0, margin_rows)
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._in_view: Set[int] = set()

    def on_becomes_visible(self, item_id: int, callback: Callable[[], None]) -> None:
        self._callbacks[item_id] = callback

    @property
    def page_size(self) -> int:
        return self.columns * self.rows

    def visible_range(self, page: int) -> range:
        start = page * self.page_size
        stop = start + self.page_size + self.margin_rows * self.columns
        return range(start, stop)

    def show_page(self, page: int) -> List[int]:
        """Fire the callbacks of items entering view; returns their ids."""
        visible = [i for i in self.visible_range(page) if i in self._callbacks]
        fired = [i for i in visible if i not in self._in_view]
        self._in_view = set(visible)
        for item_id in fired:
            self._callbacks[item_id]()
        return fired

    def hide(self) -> None:
        """Forget what is on screen (the grid was replaced by another view)."""
        self._in_view = set()
