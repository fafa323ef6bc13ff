"""Exceptions raised by the tagging engine."""

from pathlib import Path
from typing import Any, List, Optional


class ImageTaggerError(Exception):
    """Base class for recoverable image-tagger failures."""


class ScanError(ImageTaggerError):
    """The folder could not be listed (missing, not a directory, no permission)."""

    def __init__(self, folder: Path, message: str):
        super().__init__(message)
        self.folder = folder


class EmptyCatalog(ImageTaggerError):
    """The folder contains no supported images."""

    def __init__(self, folder: Path):
        super().__init__(f"No images found in {folder}")
        self.folder = folder


class DecodeError(ImageTaggerError):
    """A single image could not be read."""

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path


class DuplicateKey(ImageTaggerError):
    """A shortcut is already bound to the key."""

    def __init__(self, key: str):
        super().__init__(f"Key already exists: {key!r}")
        self.key = key


class InvalidAction(ImageTaggerError, ValueError):
    """Shortcut action outside move/copy/delete."""


class InvalidOutputPath(ImageTaggerError, ValueError):
    """Output path is not an existing writable directory."""


class NothingToCommit(ImageTaggerError):
    """Commit requested with no tagged images."""

    def __init__(self) -> None:
        super().__init__("No images tagged")


class Busy(ImageTaggerError):
    """A commit is in progress; folder and commit controls are disabled."""


class CommitStepFailure(ImageTaggerError):
    """
    A file operation failed during a commit.

    The commit stopped at ``path``. Operations listed in ``completed`` were
    already applied and stay applied.
    """

    def __init__(
        self,
        path: Path,
        action: str,
        cause: BaseException,
        completed: Optional[List[Any]] = None,
    ):
        super().__init__(f"Failed to {action} {path}: {cause}")
        self.path = path
        self.action = action
        self.cause = cause
        self.completed = list(completed or [])
