"""Tag assignment store: which shortcut each image is tagged with."""

from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from image_tagger.core.shortcuts import Shortcut, ShortcutRegistry
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)


class TagStore:
    """
    Maps image paths to shortcuts until the next commit or folder change.

    Iteration order is the order in which each path was first tagged;
    re-tagging a path replaces its shortcut without moving it.
    """

    def __init__(self, registry: ShortcutRegistry):
        self.registry = registry
        self._tags: Dict[Path, Shortcut] = {}

    def tag(self, path: Path, key: str) -> Optional[Shortcut]:
        """
        Tag an image with the shortcut bound to ``key``.

        Keys without a binding are ignored.

        Returns:
            The shortcut applied, or None if the key is unbound
        """
        shortcut = self.registry.get(key)
        if shortcut is None:
            return None
        self._tags[Path(path)] = shortcut
        logger.debug(f"Tagged {Path(path).name} with {shortcut.key!r} ({shortcut.folder})")
        return shortcut

    def untag(self, path: Path) -> bool:
        return self._tags.pop(Path(path), None) is not None

    def get(self, path: Path) -> Optional[Shortcut]:
        return self._tags.get(Path(path))

    def clear(self) -> None:
        self._tags.clear()

    def snapshot(self) -> List[Tuple[Path, Shortcut]]:
        return list(self._tags.items())

    def counts(self) -> Dict[str, int]:
        """Number of tagged images per shortcut key."""
        return dict(Counter(shortcut.key for shortcut in self._tags.values()))

    def __contains__(self, path: Path) -> bool:
        return Path(path) in self._tags

    def __len__(self) -> int:
        return len(self._tags)
