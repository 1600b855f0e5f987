"""Merge defaults, the JSON defaults file, environment and flags into one config"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

import settings
from .loader import ConfigError, ConfigLoader, get_config_loader, load_defaults_file
from .models import OAuthCLIConfig

logger = logging.getLogger(__name__)


def resolve_config(
    flags: Optional[Dict[str, Any]] = None,
    defaults_path: Optional[str] = None,
    loader: Optional[ConfigLoader] = None,
) -> OAuthCLIConfig:
    """Build the configuration for a flow run

    Built-in defaults < defaults file < environment < flags. Flag values
    of None mean "not supplied" and never override anything.

    Args:
        flags: Config keys parsed from the command line
        defaults_path: Defaults file path (default: settings.CONFIG_DEFAULTS_PATH)
        loader: ConfigLoader used for environment overrides

    Returns:
        Validated OAuthCLIConfig

    Raises:
        ConfigError: Unreadable/malformed defaults file, invalid values,
            or a required field left empty
    """
    loader = loader or get_config_loader()
    path = defaults_path or settings.CONFIG_DEFAULTS_PATH

    merged: Dict[str, Any] = {}
    merged.update(load_defaults_file(path))
    merged.update(loader.collect(settings.ENV_PREFIX, OAuthCLIConfig.model_fields))
    merged.update({key: value for key, value in (flags or {}).items() if value is not None})

    try:
        conf = OAuthCLIConfig(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"invalid configuration: {problems}") from e

    missing = conf.missing_required()
    if missing:
        raise ConfigError(f"-{missing[0]} is a required flag")

    logger.debug(
        f"Resolved config: listen={conf.listen_address} callback={conf.callback} "
        f"auth_url={conf.auth_url} token_url={conf.token_url} scopes={conf.scopes} "
        f"nonce={conf.nonce} offline={conf.offline} auth_style={conf.auth_style}"
    )
    return conf
