"""
Configuration service for the image editor.

This module handles loading, saving, and managing editor settings.
Configuration is stored as JSON in ~/.config/image_editor/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from image_editor.services.logging_service import get_logger

# Default configuration directory following XDG Base Directory Specification
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "image_editor"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    # Bounding viewport of the on-screen preview and interaction metrics
    "editor": {
        "max_width": 643,
        "max_height": 400,
        "handle_size": 8,
        "min_crop_size": 10,
        # Alpha (0-255) of the black mask drawn outside the crop rectangle
        "crop_dim_alpha": 128,
    },
    # Encoding used by the full-resolution export
    "export_format": "PNG",
    "default_save_folder": str(Path.home() / "Pictures"),
}


class ConfigService:
    """
    Service for managing editor configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/image_editor/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            # Loaded values override defaults
            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Persist any new default keys
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except (OSError, PermissionError) as e:
            self._logger.warning(
                f"Could not read config file: {e}. Using defaults."
            )

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except (OSError, PermissionError) as e:
            self._logger.error(f"Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve.
            default: Default value if key doesn't exist.

        Returns:
            The configuration value, or default if not found.
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value (in memory only).

        Note:
            Call save() to persist changes to disk.
        """
        self._config[key] = value
        self._logger.debug(f"Config key '{key}' set to '{value}'")

    def save(self) -> None:
        """Persist current configuration to disk."""
        self._save_to_file()

    # ─── Editor Settings ──────────────────────────────────────────────────

    @property
    def editor(self) -> Dict[str, Any]:
        """Get the editor section, filled in from defaults."""
        section = dict(DEFAULT_CONFIG["editor"])
        section.update(self.get("editor", {}))
        return section

    @property
    def max_width(self) -> int:
        return int(self.editor["max_width"])

    @property
    def max_height(self) -> int:
        return int(self.editor["max_height"])

    @property
    def handle_size(self) -> int:
        return int(self.editor["handle_size"])

    @property
    def min_crop_size(self) -> int:
        return int(self.editor["min_crop_size"])

    @property
    def crop_dim_alpha(self) -> int:
        return int(self.editor["crop_dim_alpha"])

    # ─── Export Settings ──────────────────────────────────────────────────

    @property
    def export_format(self) -> str:
        """Get the image format used for export."""
        return self.get("export_format", "PNG")

    @property
    def default_save_folder(self) -> str:
        """Get the default folder for exported images."""
        return self.get("default_save_folder", str(Path.home() / "Pictures"))
