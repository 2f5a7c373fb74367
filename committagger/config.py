"""
Configuration for committagger.

Defaults are merged with a JSON/TOML/YAML file, then with COMMITTAGGER_*
environment variables:

    COMMITTAGGER_GITHUB_TOKEN=ghp_...        -> github.token
    COMMITTAGGER_CACHE_TTL_SECONDS=600       -> cache.ttl_seconds
    COMMITTAGGER_BRIDGE_ENABLED=false        -> bridge.enabled
"""

import json
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import toml
import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "COMMITTAGGER_"
CONFIG_FILENAMES = ('config.json', 'config.toml', 'config.yaml', 'config.yml')


def get_config_dir() -> Path:
    return Path.home() / '.committagger'


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. COMMITTAGGER_CONFIG environment variable
    2. ~/.committagger/config.{json,toml,yaml,yml}

    Falls back to ~/.committagger/config.json (for saving) when none exists.
    """
    if 'COMMITTAGGER_CONFIG' in os.environ:
        return Path(os.environ['COMMITTAGGER_CONFIG']).expanduser()

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    return config_dir / 'config.json'


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "github": {
            "token": "",
            "use_gh_cli": False,
            "api_base": "https://api.github.com",
            "web_base": "https://github.com",
            "session_cookie": "",
            "timeout_seconds": 30,
        },
        "cache": {
            "path": str(get_config_dir() / 'tag_cache.json'),
            "ttl_seconds": 3600,
            "key_prefix": "tag_cache_",
        },
        "bridge": {
            "enabled": True,
            "timeout_seconds": 8,
            "max_pages": 50,
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s",
        },
    }


def read_config_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file, with defaults and env overrides applied."""
    config_path = config_path or get_config_path()
    config = get_default_config()

    if config_path.exists():
        try:
            file_config = read_config_file(config_path)
            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            else:
                logger.error(f"Ignoring config {config_path}: top level is not a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    # GITHUB_TOKEN is honoured when no token is configured
    if not config["github"].get("token") and os.environ.get("GITHUB_TOKEN"):
        config["github"]["token"] = os.environ["GITHUB_TOKEN"]

    return config


def save_config(config: Dict[str, Any], config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to file, in the format given by its suffix.

    Returns:
        Path written
    """
    config_path = config_path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            toml.dump(config, f)
        elif suffix in ('.yaml', '.yml'):
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _typed(value: str):
    lowered = value.lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            pass
    return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern COMMITTAGGER_SECTION_KEY, where
    multi-word keys are matched greedily:
        COMMITTAGGER_CACHE_TTL_SECONDS=60 -> config["cache"]["ttl_seconds"] = 60
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == 'COMMITTAGGER_CONFIG':
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')
        typed_value = _typed(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
            best_match_len = 0
            matched_key = None
            for config_key in current_level.keys():
                parts = config_key.split('_')
                if key_parts[i:i + len(parts)] == parts and len(parts) > best_match_len:
                    best_match_len = len(parts)
                    matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def configure_logging(config: Dict[str, Any], level: Optional[str] = None) -> None:
    """
    Configure the committagger logger from the logging section.

    Args:
        config: Loaded configuration
        level: Explicit level overriding the configured one
    """
    log_config = config.get("logging", {})
    level_name = (level or log_config.get("level") or "WARNING").upper()

    root = logging.getLogger("committagger")
    root.setLevel(getattr(logging, level_name, logging.WARNING))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setFormatter(logging.Formatter(log_config.get("format", "%(levelname)s: %(message)s")))
