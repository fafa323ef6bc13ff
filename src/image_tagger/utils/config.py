"""Configuration management for image-tagger."""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from image_tagger.core.errors import InvalidOutputPath
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)


class Config:
    """Manages the persisted settings record (shortcuts, output path, tuning)."""

    DEFAULT_CONFIG_DIR = Path.home() / ".image-tagger"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
    LOCATION_FILE = DEFAULT_CONFIG_DIR / "location.json"

    DEFAULT_SETTINGS: Dict[str, Any] = {
        "shortcuts": [],
        "output_path": None,
        "cache": {
            "max_entries": 256,  # 0 disables eviction
            "preload_workers": 3,
            "grid_margin_rows": 1,
        },
        "ui": {"grid_columns": 4, "grid_rows": 3},
        "safety": {"use_recycle_bin": False},
    }

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config file (default: the remembered location,
                else ~/.image-tagger/config.json)
        """
        self.config_file = Path(config_file) if config_file else self.remembered_location()
        self.settings: Dict[str, Any] = {}
        self.load()

    @classmethod
    def remembered_location(cls) -> Path:
        """Return the settings file chosen by ``settings use``, or the default."""
        if cls.LOCATION_FILE.exists():
            try:
                with open(cls.LOCATION_FILE, "r", encoding="utf-8") as f:
                    path = json.load(f).get("config_file")
                if path:
                    return Path(path)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable location file: {e}")
        return cls.DEFAULT_CONFIG_FILE

    def load(self) -> None:
        """Load configuration from file or create with defaults."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                self.settings = _merge_defaults(loaded, self.DEFAULT_SETTINGS)
                logger.debug(f"Loaded configuration from {self.config_file}")
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid config file: {e}. Using defaults.")
                self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        else:
            logger.info(f"No config file at {self.config_file}. Creating with defaults.")
            self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
            self.save()

    def save(self) -> None:
        """Save configuration to file."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=2)
        logger.debug(f"Saved configuration to {self.config_file}")

    def switch_location(self, config_file: Path, remember: bool = False) -> None:
        """
        Repoint subsequent load/save calls at another settings file and load it.

        A file that does not exist yet is created with defaults, so switching to
        a fresh location starts with no shortcuts.

        Args:
            config_file: Settings file to use from now on
            remember: Persist the choice so later runs pick it up
        """
        self.config_file = Path(config_file)
        self.load()
        logger.info(f"Switched settings location to {self.config_file}")

        if remember:
            self.LOCATION_FILE.parent.mkdir(parents=True, exist_ok=True)
            with open(self.LOCATION_FILE, "w", encoding="utf-8") as f:
                json.dump({"config_file": str(self.config_file)}, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., 'cache.max_entries')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.settings
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value
        self.save()

    def get_shortcut_records(self) -> List[Dict[str, str]]:
        """Raw ``{key, folder, action}`` records as stored on disk."""
        return list(self.get("shortcuts", []))

    def set_shortcut_records(self, records: List[Dict[str, str]]) -> None:
        self.set("shortcuts", records)

    def get_output_path(self) -> Optional[Path]:
        """Configured output directory, or None to organize inside the source folder."""
        value = self.get("output_path")
        return Path(value) if value else None

    def set_output_path(self, path: Optional[Path]) -> None:
        """
        Set (or clear, with None) the default output directory.

        Raises:
            InvalidOutputPath: If the path is not an existing writable directory
        """
        if path is None:
            self.set("output_path", None)
            logger.info("Cleared output path")
            return

        path = Path(path).expanduser().resolve()
        if not path.is_dir():
            raise InvalidOutputPath(f"Not an existing directory: {path}")
        if not os.access(path, os.W_OK):
            raise InvalidOutputPath(f"Directory is not writable: {path}")

        self.set("output_path", str(path))
        logger.info(f"Output path set to {path}")

    def get_operations_log(self) -> Path:
        """Commit log kept next to the settings file."""
        return self.config_file.parent / "operations.log"


def _merge_defaults(loaded: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from ``loaded`` with (copies of) the defaults."""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged
