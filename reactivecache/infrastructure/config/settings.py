"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.reactivecache/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".reactivecache"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_CACHE_DIR = DEFAULT_CONFIG_DIR / "cache"
DEFAULT_MAX_MB = 100
DEFAULT_MEMORY_MAX_ENTRIES = 1000
ENV_FILE_NAME = ".env"
ENV_PREFIX = "REACTIVECACHE_"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_overrides: Dict[str, Any] = {}  # set at runtime, e.g. from CLI options
_loaded = False


def env_var_name(key: str) -> str:
    """'cache.max_mb' -> 'REACTIVECACHE_CACHE_MAX_MB'."""
    return f"{ENV_PREFIX}{key.upper().replace('.', '_')}"


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for name, value in data.items():
        dotted = f"{prefix}{name}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Nested YAML mappings are addressed with dotted keys, so
    ``cache: {max_mb: 50}`` is read as ``cache.max_mb``.

    Args:
        config_file: Path to the YAML configuration file (DEFAULT_CONFIG_FILE if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (override=False: real environment variables win)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets everything loaded so the next load_configuration starts over."""
    global _config, _loaded
    _config = {}
    _overrides.clear()
    _loaded = False


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        return float(value) if '.' in value else int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dotted key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Runtime overrides (set_config)
    3. Environment variable (REACTIVECACHE_ prefix, dots as underscores)
    4. YAML config
    5. Default value
    """
    if key in _test_config:
        return _test_config[key]

    if key in _overrides:
        return _overrides[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_cache_directory() -> Path:
    """Directory holding the persisted records."""
    return Path(str(get_config('cache.directory', DEFAULT_CACHE_DIR))).expanduser()


def _positive_int(key: str, default: int) -> int:
    value = get_config(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {key} value '{value}'. Using {default}.")
        return default
    if number <= 0:
        logger.warning(f"{key} must be positive, got {number}. Using {default}.")
        return default
    return number


def get_max_mb() -> int:
    """Disk budget in megabytes for persisted records."""
    return _positive_int('cache.max_mb', DEFAULT_MAX_MB)


def get_memory_max_entries() -> int:
    """How many records the in-process layer keeps."""
    return _positive_int('cache.memory_max_entries', DEFAULT_MEMORY_MAX_ENTRIES)


def use_expired_data() -> bool:
    """Engine default for serving expired data when a loader fails."""
    flag = get_config('cache.use_expired_data', False)
    if isinstance(flag, str):
        if flag.lower() in ('true', '1', 'yes'):
            return True
        if flag.lower() in ('false', '0', 'no', ''):
            return False
        logger.warning(f"Unexpected string value for cache.use_expired_data: '{flag}'. Defaulting to False.")
        return False
    return bool(flag)


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value by key for the rest of the process.

    Args:
        key: Configuration key (e.g., 'logging.level')
        value: Value to set
    """
    logger.debug(f"Setting config: {key} = {value}")
    _overrides[key] = value


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
