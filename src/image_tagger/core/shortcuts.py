"""Shortcut registry: key -> (destination folder, action) bindings."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional

from image_tagger.core.errors import DuplicateKey, InvalidAction
from image_tagger.utils.config import Config
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)


class Action(str, Enum):
    """What a commit does with an image tagged by a shortcut."""

    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str) -> "Action":
        try:
            return cls(value)
        except ValueError:
            raise InvalidAction(
                f"Unknown action {value!r} (expected move, copy or delete)"
            ) from None


@dataclass(frozen=True)
class Shortcut:
    """A key bound to a destination subfolder and an action."""

    key: str
    folder: str
    action: Action

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "folder": self.folder, "action": self.action.value}

    @classmethod
    def from_dict(cls, record: Dict[str, str]) -> "Shortcut":
        """
        Build a shortcut from a settings record.

        Raises:
            KeyError: If a field is missing
            ValueError: If the key, folder or action is unusable
        """
        folder = record["folder"]
        if not isinstance(folder, str) or not folder:
            raise ValueError(f"Shortcut folder must be a non-empty string, got {folder!r}")
        return cls(
            key=normalize_key(record["key"]),
            folder=folder,
            action=Action.parse(record["action"]),
        )


def normalize_key(key: str) -> str:
    """
    Lowercase a shortcut key and check it is a single printable character.

    Raises:
        ValueError: If the key is empty, longer than one character or not printable
    """
    if not key or len(key) != 1 or not key.isprintable() or key.isspace():
        raise ValueError(f"Shortcut key must be a single printable character, got {key!r}")
    return key.lower()


class ShortcutRegistry:
    """
    Ordered set of shortcuts with unique keys.

    Every mutation is written back to the settings file.
    """

    def __init__(self, config: Config):
        """
        Initialize the registry from the persisted settings.

        Args:
            config: Configuration instance holding the ``shortcuts`` records
        """
        self.config = config
        self._shortcuts: List[Shortcut] = []
        self.reload()

    def reload(self) -> None:
        """Re-read the shortcuts from the (possibly relocated) settings file."""
        shortcuts: List[Shortcut] = []
        seen = set()
        for record in self.config.get_shortcut_records():
            try:
                shortcut = Shortcut.from_dict(record)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring invalid shortcut in settings {record!r}: {e}")
                continue
            if shortcut.key in seen:
                logger.warning(f"Ignoring duplicate shortcut key in settings: {shortcut.key!r}")
                continue
            seen.add(shortcut.key)
            shortcuts.append(shortcut)
        self._shortcuts = shortcuts
        logger.debug(f"Loaded {len(shortcuts)} shortcuts")

    def add(self, key: str, folder: str, action: str = "move") -> Shortcut:
        """
        Bind a key to a destination folder and action.

        Args:
            key: Single character, stored lowercase
            folder: Destination folder name relative to the output path (verbatim)
            action: One of move, copy, delete

        Returns:
            The new shortcut

        Raises:
            DuplicateKey: If the key is already bound (registry unchanged)
            InvalidAction: If the action is not move, copy or delete
            ValueError: If the key or folder is unusable
        """
        key = normalize_key(key)
        if not folder:
            raise ValueError("Shortcut folder must not be empty")
        if self.get(key) is not None:
            raise DuplicateKey(key)

        shortcut = Shortcut(key=key, folder=folder, action=Action.parse(action))
        self._shortcuts.append(shortcut)
        self._persist()
        logger.info(f"Added shortcut {key!r} -> {folder} ({shortcut.action.value})")
        return shortcut

    def remove(self, key: str) -> bool:
        """
        Remove the binding for a key. Removing an unbound key is a no-op.

        Returns:
            True if a shortcut was removed
        """
        key = key.lower()
        remaining = [s for s in self._shortcuts if s.key != key]
        removed = len(remaining) != len(self._shortcuts)
        self._shortcuts = remaining
        self._persist()
        if removed:
            logger.info(f"Removed shortcut {key!r}")
        return removed

    def get(self, key: str) -> Optional[Shortcut]:
        key = key.lower()
        for shortcut in self._shortcuts:
            if shortcut.key == key:
                return shortcut
        return None

    def keys(self) -> List[str]:
        return [s.key for s in self._shortcuts]

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __iter__(self) -> Iterator[Shortcut]:
        return iter(list(self._shortcuts))

    def __len__(self) -> int:
        return len(self._shortcuts)

    def _persist(self) -> None:
        self.config.set_shortcut_records([s.to_dict() for s in self._shortcuts])
