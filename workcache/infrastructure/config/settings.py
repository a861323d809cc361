"""Provides functions for loading and accessing configuration settings.

Supports loading from a YAML configuration file (~/.workcache/config.yaml),
a .env file and environment variables, and turns the result into the
CacheSettings used to build a CacheManager.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from workcache.core.cache_manager import DEFAULT_MAX_AGE_SECONDS, CacheManager
from workcache.infrastructure.cache.evictor import DEFAULT_MAX_SIZE_BYTES
from workcache.infrastructure.cache.preload_strategies import (
    DEFAULT_PRELOAD_WINDOW,
    AdjacentIdStrategy,
    NoPreloadStrategy,
)
from workcache.infrastructure.cache.preloader import DEFAULT_MAX_QUEUED_TRIGGERS

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".workcache"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_CACHE_DIR_NAME = ".workcache"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "WORKCACHE_"

# --- Global Configuration Store (Simple Approach) ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ('cache.max_age')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Test overrides (set_config_for_testing)
    2. Environment Variables (WORKCACHE_CACHE_MAX_AGE for 'cache.max_age')
    3. .env file (exported into the environment, never overriding it)
    4. YAML configuration file
    5. Default values

    Args:
        config_file: Path to the YAML configuration file.
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
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load_configuration re-reads it."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _env_name(key: str) -> str:
    return ENV_PREFIX + key.upper().replace('.', '_')


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = _env_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    try:
        cwd = Path.cwd()
        for path in [cwd] + list(cwd.parents):
            env_path = path / ENV_FILE_NAME
            if env_path.is_file():
                return env_path
    except OSError as e:
        logger.warning(f"Error searching for .env file: {e}")
    return None


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


# --- Typed Settings ---

@dataclass
class CacheSettings:
    """Resolved settings for building a CacheManager and its logging."""
    cache_dir: Path
    max_age: float = DEFAULT_MAX_AGE_SECONDS
    max_size: int = DEFAULT_MAX_SIZE_BYTES
    preload_enabled: bool = True
    preload_window: int = DEFAULT_PRELOAD_WINDOW
    max_queued_triggers: int = DEFAULT_MAX_QUEUED_TRIGGERS
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def create_manager(self, **overrides: Any) -> CacheManager:
        """Builds a CacheManager from these settings (keyword overrides win)."""
        strategy = AdjacentIdStrategy(window=self.preload_window) if self.preload_enabled else NoPreloadStrategy()
        kwargs: Dict[str, Any] = {
            "max_age": self.max_age,
            "max_size": self.max_size,
            "preload_strategy": strategy,
            "max_queued_triggers": self.max_queued_triggers,
        }
        kwargs.update(overrides)
        return CacheManager(self.cache_dir, **kwargs)


def load_cache_settings(cache_dir: Optional[Path] = None) -> CacheSettings:
    """Resolves CacheSettings from the loaded configuration.

    Args:
        cache_dir: Explicit cache directory, taking precedence over 'cache.dir'.
    """
    load_configuration()
    configured_dir = cache_dir or get_config('cache.dir') or Path.cwd() / DEFAULT_CACHE_DIR_NAME
    log_file = get_config('logging.file')
    return CacheSettings(
        cache_dir=Path(configured_dir).expanduser(),
        max_age=float(get_config('cache.max_age', DEFAULT_MAX_AGE_SECONDS)),
        max_size=int(get_config('cache.max_size', DEFAULT_MAX_SIZE_BYTES)),
        preload_enabled=bool(get_config('preload.enabled', True)),
        preload_window=int(get_config('preload.window', DEFAULT_PRELOAD_WINDOW)),
        max_queued_triggers=int(get_config('preload.max_queued', DEFAULT_MAX_QUEUED_TRIGGERS)),
        log_level=str(get_config('logging.level', 'INFO')).upper(),
        log_file=str(log_file) if log_file else None,
    )
