"""Utility functions for configuration, logging, and helpers."""

from image_tagger.utils.config import Config
from image_tagger.utils.logger import setup_logger

__all__ = ["Config", "setup_logger"]
