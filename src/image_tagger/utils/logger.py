"""
Logging configuration for image-tagger.

Handlers live on the package logger ``image_tagger``. Module loggers are its
children and propagate to it, so ``set_level`` re-levels all of them at once.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "image_tagger"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Get a logger whose records go through the package's handlers.

    The first call installs the console handler on the package logger; later
    calls reuse it.

    Args:
        name: Logger name, normally the calling module's ``__name__``
        level: Logging level set when the package logger is first configured
        log_file: Optional file path for a debug-level log of commits and scans

    Returns:
        Logger for ``name``
    """
    package_logger = logging.getLogger(name.split(".", 1)[0] or PACKAGE_LOGGER)

    if not package_logger.handlers:
        package_logger.setLevel(level)
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(fmt="%(levelname)s: %(message)s"))
        package_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        package_logger.addHandler(file_handler)

    return logging.getLogger(name)


def set_level(level: int) -> None:
    """Re-level the package logger and its console handler (``--verbose``)."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
