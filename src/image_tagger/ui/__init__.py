"""User interface components (terminal rendering and key input)."""

from image_tagger.ui.review import ImageMetadata, ReviewUI, read_key, translate_key

__all__ = ["ImageMetadata", "ReviewUI", "read_key", "translate_key"]
