"""Configuration loader for credsweep."""
import os
import logging
from pathlib import Path
from typing import Dict, Any
import yaml

from .errors import ConfigError
from .preferences import get_preference

logger = logging.getLogger(__name__)

SUPPORTED_AUTH_TYPES = ("client_secret", "default")
DEFAULT_SECRET_ENV = "AZURE_CLIENT_SECRET"
DEFAULT_GRAPH_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_APP_COLUMN = "AppId"
DEFAULT_SECRET_COLUMN = "SecretId"


def default_config_path() -> Path:
    return Path.home() / ".config" / "credsweep" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/credsweep/preferences.json)
    2. Default location: ~/.config/credsweep/config.yml

    Returns:
        Absolute path to config file

    Raises:
        ConfigError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise ConfigError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   credsweep config set-path /path/to/your/config.yml\n"
    )


def _validate_authentication(auth: Any, config_path: str) -> None:
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' in {config_path} must be a mapping")

    if 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] not in SUPPORTED_AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Supported types: {', '.join(SUPPORTED_AUTH_TYPES)}."
        )

    if auth['type'] != 'client_secret':
        return

    for key in ('tenant_id', 'client_id'):
        if not auth.get(key):
            raise ConfigError(
                f"Missing 'authentication.{key}' in config\n"
                f"Client secret authentication needs both tenant_id and client_id."
            )

    secret_env = auth.get('client_secret_env') or DEFAULT_SECRET_ENV
    secret = os.getenv(secret_env)
    if not secret:
        raise ConfigError(
            f"Environment variable {secret_env} is not set\n"
            f"Export the client secret for {auth['client_id']} before running credsweep."
        )
    auth['client_secret_env'] = secret_env
    auth['client_secret'] = secret


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - authentication: type, tenant_id, client_id and the resolved client_secret
        - graph: base_url and timeout
        - input: app_column and secret_column

    Raises:
        ConfigError: If config file is missing or invalid
    """
    # Resolved on every call so a changed preference applies immediately
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n"
            f"authentication:\n"
            f"  type: client_secret\n"
            f"  tenant_id: <tenant id>\n"
            f"  client_id: <application id>"
        )

    _validate_authentication(config['authentication'], config_path)

    graph = config.get('graph') or {}
    try:
        timeout = float(graph.get('timeout', DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        raise ConfigError(f"'graph.timeout' must be a number, got: {graph.get('timeout')!r}")
    config['graph'] = {
        'base_url': str(graph.get('base_url') or DEFAULT_GRAPH_URL).rstrip('/'),
        'timeout': timeout,
    }

    input_section = config.get('input') or {}
    config['input'] = {
        'app_column': input_section.get('app_column') or DEFAULT_APP_COLUMN,
        'secret_column': input_section.get('secret_column') or DEFAULT_SECRET_COLUMN,
    }

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using authentication type: {config['authentication']['type']}")
    logger.debug(f"Using Graph endpoint: {config['graph']['base_url']}")

    return config
