"""Configuration loader for oauth2-cli

Loads configuration from multiple sources with the following priority:
1. Command-line flags (highest priority, applied by the resolver)
2. Environment variables / .env file
3. JSON defaults file
4. Hardcoded defaults (lowest priority)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional
from dotenv import load_dotenv

# Set up logger for config loader
logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration could not be loaded or is incomplete"""


class ConfigLoader:
    """Handles loading configuration from various sources"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to '.env' in the current directory.
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        """Load environment variables from .env file if it exists"""
        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value with priority: env > default

        Args:
            env_var: Environment variable name to check
            default: Default value if not found in environment

        Returns:
            The configuration value from environment or default
        """
        # Check environment variable
        env_value = os.getenv(env_var)
        if env_value is not None:
            # Try to parse as appropriate type
            if isinstance(default, bool):
                return env_value.lower() in ('true', '1', 'yes')
            elif isinstance(default, int):
                try:
                    return int(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var}={env_value} as int, using default: {default}")
                    return default
            elif isinstance(default, float):
                try:
                    return float(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var}={env_value} as float, using default: {default}")
                    return default
            return env_value

        # Return default
        # Expand home directory if it's a path
        if isinstance(default, str) and default.startswith("~/"):
            return str(Path(default).expanduser())
        return default

    def collect(self, prefix: str, keys: Iterable[str]) -> Dict[str, str]:
        """Collect raw environment overrides for config keys

        Only variables that are actually set are returned, so an unset
        variable never masks a value from a lower-priority source.

        Args:
            prefix: Environment variable prefix (e.g. 'OAUTH2_CLI_')
            keys: Config keys; each maps to prefix + key.upper()

        Returns:
            Mapping of config key to the raw string value
        """
        overrides = {}
        for key in keys:
            env_value = os.getenv(f"{prefix}{key.upper()}")
            if env_value is not None:
                overrides[key] = env_value
        if overrides:
            logger.debug(f"Environment overrides: {sorted(overrides)}")
        return overrides


# Create a global instance
_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_defaults_file(path: str) -> Dict[str, Any]:
    """Load the JSON defaults file

    A missing file is not an error. Anything else that prevents reading
    a JSON object from it is.

    Args:
        path: Path to the defaults file

    Returns:
        Raw mapping of config keys found in the file (empty if absent)

    Raises:
        ConfigError: If the file exists but is unreadable or malformed
    """
    file_path = Path(path)

    if not file_path.exists():
        logger.debug(f"Defaults file not found: {file_path}")
        return {}

    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse {str(file_path)!r}: {e}") from e
    except (IOError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to open {str(file_path)!r}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"failed to parse {str(file_path)!r}: expected a JSON object, got {type(data).__name__}")

    logger.debug(f"Loaded {len(data)} key(s) from {file_path}: {sorted(data)}")
    return data
