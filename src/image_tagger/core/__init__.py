"""Core tagging engine: catalog, cache, shortcuts, tags and batch commit."""

from image_tagger.core.cache import ImageCache
from image_tagger.core.catalog import ImageCatalog, ImageEntry
from image_tagger.core.organizer import BatchOrganizer, CommitResult
from image_tagger.core.session import ViewerSession
from image_tagger.core.shortcuts import Action, Shortcut, ShortcutRegistry
from image_tagger.core.tags import TagStore

__all__ = [
    "Action",
    "BatchOrganizer",
    "CommitResult",
    "ImageCache",
    "ImageCatalog",
    "ImageEntry",
    "Shortcut",
    "ShortcutRegistry",
    "TagStore",
    "ViewerSession",
]
