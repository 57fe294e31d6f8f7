"""Global configuration management for commitmsg.

Handles user-level configuration stored in ~/.commitmsg/:
- config.yaml: Provider, model, cache policy and concurrency settings
- credentials: API keys for LLM providers
- cache.json / usage_stats.json: default locations of the persisted stores
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from commitmsg.cache.models import CacheConfig
from commitmsg.config import (
    CACHE_FILE_NAME,
    DEFAULT_CACHE_CLEANUP_INTERVAL_HOURS,
    DEFAULT_CACHE_ENABLED,
    DEFAULT_CACHE_MAX_AGE_DAYS,
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT,
    STATS_FILE_NAME,
    LLMProvider,
)
from commitmsg.exceptions import ConfigurationError


class GlobalConfigError(ConfigurationError):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".commitmsg"


def get_global_config_dir() -> Path:
    """Get the global commitmsg configuration directory.

    Returns:
        Path to ~/.commitmsg/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.commitmsg/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    """Get path to credentials file."""
    return get_global_config_dir() / "credentials"


def get_stats_file_path() -> Path:
    """Get path to the usage statistics file.

    Returns:
        The ``stats.file_path`` setting, or ~/.commitmsg/usage_stats.json.
    """
    config = load_global_config()
    custom = (config.get("stats") or {}).get("file_path")
    if custom:
        return Path(custom).expanduser()
    return get_global_config_dir() / STATS_FILE_NAME


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from ~/.commitmsg/config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file cannot be read or parsed.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to ~/.commitmsg/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def _parse_credentials(text: str) -> Dict[str, str]:
    credentials = {}
    for line in text.splitlines():
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        # Parse KEY=value format
        if "=" in line:
            key, value = line.split("=", 1)
            credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.commitmsg/credentials.

    Returns:
        Dictionary mapping environment variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _parse_credentials(credentials_file.read_text())
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(provider_key: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = load_credentials()
    existing_creds[provider_key] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# commitmsg API credentials\n")
            f.write("# This file stores API keys for LLM providers\n")
            f.write("# Format: PROVIDER_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        # Set secure permissions (owner read/write only)
        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(provider_key: str) -> Optional[str]:
    """Get an API key from credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")

    Returns:
        The API key if found, None otherwise.
    """
    return load_credentials().get(provider_key)


def get_active_provider() -> Optional[LLMProvider]:
    """Get the active LLM provider from global config.

    Returns:
        LLMProvider enum value, or None if not configured.
    """
    provider_str = load_global_config().get("provider")

    if not provider_str:
        return None

    try:
        return LLMProvider(provider_str)
    except ValueError:
        return None


def get_active_model() -> Optional[str]:
    """Get the active model from global config."""
    return load_global_config().get("model")


def set_provider_and_model(provider: LLMProvider, model: str) -> None:
    """Set the active provider and model in global config.

    Args:
        provider: The LLM provider to use.
        model: The model name to use.
    """
    config = load_global_config()
    config["provider"] = provider.value
    config["model"] = model
    save_global_config(config)


def get_max_tokens() -> Optional[int]:
    """Get max_tokens setting from global config."""
    return load_global_config().get("max_tokens")


def get_temperature() -> Optional[float]:
    """Get temperature setting from global config."""
    return load_global_config().get("temperature")


def get_max_concurrent() -> int:
    """Get the ceiling on concurrent generation calls.

    Returns:
        The ``max_concurrent`` setting, or DEFAULT_MAX_CONCURRENT.

    Raises:
        GlobalConfigError: If the value is not a positive integer.
    """
    value = load_global_config().get("max_concurrent", DEFAULT_MAX_CONCURRENT)
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise GlobalConfigError(f"max_concurrent must be a positive integer, got {value!r}")
    return value


def get_log_level() -> str:
    """Get the log level name from global config."""
    return str(load_global_config().get("log_level", DEFAULT_LOG_LEVEL)).upper()


def get_cache_config() -> CacheConfig:
    """Build the cache policy from the ``cache`` section of config.yaml.

    Returns:
        A frozen CacheConfig with defaults filled in.

    Raises:
        GlobalConfigError: If the section holds invalid values.
    """
    section = load_global_config().get("cache") or {}
    file_path = section.get("cache_file_path")
    cache_file = Path(file_path).expanduser() if file_path else get_global_config_dir() / CACHE_FILE_NAME

    try:
        return CacheConfig(
            enabled=section.get("enabled", DEFAULT_CACHE_ENABLED),
            max_entries=section.get("max_entries", DEFAULT_CACHE_MAX_ENTRIES),
            max_age_days=section.get("max_age_days", DEFAULT_CACHE_MAX_AGE_DAYS),
            cleanup_interval_hours=section.get(
                "cleanup_interval_hours", DEFAULT_CACHE_CLEANUP_INTERVAL_HOURS
            ),
            cache_file_path=cache_file,
        )
    except ValidationError as e:
        raise GlobalConfigError(f"Invalid cache configuration: {e}")


def initialize_default_config() -> None:
    """Initialize config.yaml with default values if it doesn't exist."""
    if get_config_file_path().exists():
        return

    default_config = {
        "provider": "gemini",
        "model": "gemini-2.0-flash",
        "max_tokens": 1500,
        "temperature": 0.3,
        "max_concurrent": DEFAULT_MAX_CONCURRENT,
        "log_level": DEFAULT_LOG_LEVEL,
        "cache": {
            "enabled": DEFAULT_CACHE_ENABLED,
            "max_entries": DEFAULT_CACHE_MAX_ENTRIES,
            "max_age_days": DEFAULT_CACHE_MAX_AGE_DAYS,
            "cleanup_interval_hours": DEFAULT_CACHE_CLEANUP_INTERVAL_HOURS,
        },
    }

    save_global_config(default_config)


def is_configured() -> bool:
    """Check if commitmsg has been configured.

    Returns:
        True if config.yaml exists, False otherwise.
    """
    return get_config_file_path().exists()
