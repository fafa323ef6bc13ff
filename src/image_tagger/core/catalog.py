"""Image catalog: the ordered list of images in the open folder."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from image_tagger.core.errors import EmptyCatalog, ScanError
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ImageEntry:
    """An image file in the catalog."""

    name: str
    path: Path


class ImageCatalog:
    """Scans a single folder (non-recursively) for supported images."""

    # Supported image extensions
    IMAGE_EXTENSIONS = (
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".webp",
    )

    def __init__(self) -> None:
        self.folder: Optional[Path] = None
        self.entries: List[ImageEntry] = []

    def scan(self, folder: Path) -> List[ImageEntry]:
        """
        Scan a folder and replace the catalog with its images.

        Entries keep the directory-listing order. On failure the previous
        snapshot is left as it was.

        Args:
            folder: Directory to scan

        Returns:
            The new list of image entries

        Raises:
            ScanError: If the folder cannot be listed
            EmptyCatalog: If the folder holds no supported images
        """
        folder = Path(folder)
        logger.info(f"Scanning directory: {folder}")

        try:
            with os.scandir(folder) as listing:
                entries = [
                    ImageEntry(name=item.name, path=folder / item.name)
                    for item in listing
                    if item.is_file() and self.is_image_name(item.name)
                ]
        except OSError as e:
            logger.error(f"Error scanning {folder}: {e}")
            raise ScanError(folder, f"Error loading images: {e}") from e

        if not entries:
            raise EmptyCatalog(folder)

        self.folder = folder
        self.entries = entries
        logger.info(f"Found {len(entries)} image files")
        return entries

    def refresh(self) -> List[ImageEntry]:
        """
        Re-scan the current folder.

        A folder emptied by a commit yields an empty catalog instead of
        raising EmptyCatalog.
        """
        if self.folder is None:
            raise ScanError(Path("."), "No folder has been opened")
        try:
            return self.scan(self.folder)
        except EmptyCatalog:
            self.entries = []
            return self.entries

    @classmethod
    def is_image_name(cls, name: str) -> bool:
        return name.lower().endswith(cls.IMAGE_EXTENSIONS)

    def index_of(self, path: Path) -> int:
        """Position of ``path`` in the catalog, or -1."""
        for index, entry in enumerate(self.entries):
            if entry.path == Path(path):
                return index
        return -1

    def find(self, name: str) -> Optional[ImageEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def __getitem__(self, index: int) -> ImageEntry:
        return self.entries[index]

    def __iter__(self) -> Iterator[ImageEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
