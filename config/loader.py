"""Configuration loader for gdocs-sync

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment variable that points at an alternative .env file
ENV_FILE_VAR = "GDOCS_SYNC_ENV_FILE"

TRUTHY = ("true", "1", "yes", "on")


class ConfigLoader:
    """Handles loading configuration from various sources"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to $GDOCS_SYNC_ENV_FILE, then '.env' in the current directory.
        """
        env_path = env_path or os.getenv(ENV_FILE_VAR)
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        """Load environment variables from .env file if it exists"""
        if self.env_path.exists():
            # Values already in the environment win over the file
            load_dotenv(dotenv_path=self.env_path, override=False)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value with priority: env > default

        The environment value is coerced to the type of ``default``.

        Args:
            env_var: Environment variable name to check
            default: Default value if not found in environment

        Returns:
            The configuration value from environment or default
        """
        env_value = os.getenv(env_var)
        if env_value is None:
            return self._expand_path(default)

        # bool subclasses int, so it is matched first
        if isinstance(default, bool):
            return env_value.strip().lower() in TRUTHY
        if isinstance(default, (int, float)):
            number_type = type(default)
            try:
                return number_type(env_value)
            except ValueError:
                logger.warning(
                    f"{env_var}={env_value!r} is not a valid {number_type.__name__}, keeping {default}"
                )
                return default
        return self._expand_path(env_value)

    @staticmethod
    def _expand_path(value: Any) -> Any:
        """Expand a leading ~/ in string values"""
        if isinstance(value, str) and value.startswith("~/"):
            return str(Path(value).expanduser())
        return value


# Create a global instance
_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config_loader() -> None:
    """Drop the global ConfigLoader so the next call re-reads the .env file"""
    global _config_loader
    _config_loader = None
