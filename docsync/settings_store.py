"""Persistent settings record: target folder, app credentials and cached tokens"""

import json
import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from settings import SETTINGS_FILE
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Stored key -> Settings attribute
FIELD_KEYS = {
    "googleDriveFolderId": "folder_id",
    "credentials": "credentials",
    "tokens": "tokens",
}

DEFAULT_SETTINGS: Dict[str, str] = {key: "" for key in FIELD_KEYS}


@dataclass
class Settings:
    """Settings record

    Attributes:
        folder_id: Target Drive folder; empty means no folder constraint
        credentials: Opaque application credential JSON supplied by the user
        tokens: Opaque serialized OAuth token set; empty until first authorization
        extra: Unknown keys from the settings file, written back untouched
    """
    folder_id: str = ""
    credentials: str = ""
    tokens: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        for key, attr in FIELD_KEYS.items():
            data[key] = getattr(self, attr)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Merge stored values over the defaults

        Raises:
            ConfigurationError: If a known field is not a string
        """
        merged = {**DEFAULT_SETTINGS, **data}
        values = {}
        for key, attr in FIELD_KEYS.items():
            value = merged[key]
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ConfigurationError(f"Setting '{key}' must be a string, got {type(value).__name__}.")
            values[attr] = value
        extra = {k: v for k, v in data.items() if k not in FIELD_KEYS}
        return cls(extra=extra, **values)


class SettingsStore:
    """JSON file persistence for the settings record, with owner-only permissions"""

    def __init__(self, settings_file: Optional[str] = None):
        self.settings_path = Path(settings_file if settings_file else SETTINGS_FILE).expanduser()

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.settings_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def load(self) -> Settings:
        """Load settings, falling back to defaults when the file does not exist

        Raises:
            ConfigurationError: If the file exists but is not a JSON object
        """
        if not self.settings_path.exists():
            logger.debug(f"No settings file at {self.settings_path}, using defaults")
            return Settings()

        try:
            data = json.loads(self.settings_path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Settings file {self.settings_path} is not valid JSON: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Could not read settings file {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {self.settings_path} must contain a JSON object.")

        logger.debug(f"Loaded settings from {self.settings_path}")
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        """Write settings to disk

        Raises:
            ConfigurationError: If the file cannot be written
        """
        try:
            self._ensure_secure_directory()
            self.settings_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
            if platform.system() != "Windows":
                os.chmod(self.settings_path, 0o600)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            raise ConfigurationError(f"Could not write settings file {self.settings_path}: {e}") from e

        logger.debug(f"Saved settings to {self.settings_path}")

    def update(self, **changes: str) -> Settings:
        """Load, change the given fields, save and return the new record"""
        settings = self.load()
        for attr, value in changes.items():
            if attr not in FIELD_KEYS.values():
                raise ConfigurationError(f"Unknown setting '{attr}'.")
            setattr(settings, attr, value)
        self.save(settings)
        return settings

    @property
    def settings_file(self) -> Path:
        """Get the settings file path"""
        return self.settings_path
