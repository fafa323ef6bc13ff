"""
Image Tagger - Keyboard-driven image review and batch organization.

Review a folder of images one at a time or as a grid, tag each image with a
single-key shortcut (destination folder + move/copy/delete), then commit all
tags in one batch that reorganizes the files on disk.
"""

__version__ = "0.1.0"
__author__ = "Image Tagger Contributors"

from image_tagger.core.catalog import ImageCatalog
from image_tagger.core.organizer import BatchOrganizer
from image_tagger.core.session import ViewerSession
from image_tagger.core.shortcuts import ShortcutRegistry

__all__ = [
    "BatchOrganizer",
    "ImageCatalog",
    "ShortcutRegistry",
    "ViewerSession",
    "__version__",
]
