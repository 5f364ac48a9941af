"""
Settings Manager for the catalog organizer.
Handles configuration from defaults, an optional settings.json and environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
ENV_PREFIX = "CATALOG_ORGANIZER_"


class SettingsManager:
    """Manages application settings. Later sources override earlier ones: defaults, JSON, env."""

    # Default settings
    DEFAULTS = {
        # Storage
        "database_path": "data/databases/products.db",
        "rules_path": "",  # empty -> bundled classification_rules.yaml
        # Batch apply
        "max_workers": 4,
        "write_timeout": 10.0,
        "write_retries": 0,
        "retry_backoff": 0.5,
        # Classification
        "keep_unmatched_product_type": False,
        # Stock
        "low_stock_threshold": 5,
        # Application Settings
        "log_level": "INFO",
    }

    def __init__(self, settings_file: Optional[Path] = None, load_env: bool = True):
        """
        Initialize settings manager.

        Args:
            settings_file: JSON settings file (defaults to settings.json at the project root)
            load_env: Whether to read CATALOG_ORGANIZER_* environment variables (and .env)
        """
        self.settings_file = Path(settings_file) if settings_file else PROJECT_ROOT / "settings.json"
        self._values: Dict[str, Any] = dict(self.DEFAULTS)

        self._load_from_json()
        if load_env:
            load_dotenv()
            self._load_from_env()

    def _load_from_json(self):
        """Load settings from the JSON settings file if it exists."""
        if not self.settings_file.exists():
            return
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                json_settings = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.settings_file}: {e}")
            return

        for key, value in json_settings.items():
            if key in self.DEFAULTS:
                self.set(key, value)

    def _load_from_env(self):
        """Load CATALOG_ORGANIZER_<KEY> environment variables."""
        for key in self.DEFAULTS:
            env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if env_value is not None and env_value != "":
                self.set(key, env_value)

    @staticmethod
    def _coerce(value: Any) -> Any:
        if not isinstance(value, str):
            return value

        # Convert string booleans
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        # Convert string numbers
        if value.isdigit():
            return int(value)
        try:
            return float(value)
        except ValueError:
            return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        if default is None:
            default = self.DEFAULTS.get(key, "")
        return self._coerce(self._values.get(key, default))

    def set(self, key: str, value: Any):
        """Set a setting value."""
        self._values[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all settings as a dictionary."""
        return {key: self.get(key) for key in self.DEFAULTS}

    def reset_to_defaults(self):
        """Reset all settings to defaults."""
        self._values = dict(self.DEFAULTS)

    def save(self):
        """Write the current settings to the JSON settings file."""
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(self.get_all(), f, indent=2)

    # Convenience methods for commonly accessed settings
    @property
    def database_path(self) -> str:
        """Get the database path."""
        path = str(self.get("database_path"))
        if not os.path.isabs(path):
            # Relative paths are relative to the project root
            path = str(PROJECT_ROOT / path)
        return path

    @property
    def rules_path(self) -> Optional[str]:
        """Get the rule file path, or None for the bundled rules."""
        return self.get("rules_path") or None

    @property
    def apply_settings(self) -> Dict[str, Any]:
        """Keyword arguments for BatchApplyEngine."""
        timeout = self.get("write_timeout")
        return {
            "max_workers": int(self.get("max_workers")),
            "write_timeout": float(timeout) if timeout else None,
            "write_retries": int(self.get("write_retries")),
            "retry_backoff": float(self.get("retry_backoff")),
        }


# Global settings instance
settings = SettingsManager()
