"""Configuration management package for oauth2-cli"""

from .loader import ConfigError, ConfigLoader, get_config_loader, load_defaults_file

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "get_config_loader",
    "load_defaults_file",
]
