"""
Configuration loading for gitreport.

Handles loading configuration from ~/.gitreport/config.json with sensible defaults.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from gitreport.errors import InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    # IANA zone used to interpret report dates
    "timezone": "UTC",

    # Repository access
    "git_binary": "git",
    "git_timeout_seconds": 60,

    # Rendering limits
    "max_files_per_author": 50,
    "top_files": 5,

    # Optional Jinja2 template replacing the built-in layout
    "template": None,

    # HTTP server
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
        "cors_origins": ["*"],
    },

    # Optional report polishing through a chat-completions API
    "optimizer": {
        "api_url": "https://api.deepseek.com/v1/chat/completions",
        "api_key": None,
        "model": "deepseek-chat",
        "max_tokens": 2000,
        "temperature": 0.7,
        "timeout_seconds": 60,
    },
}

_SECTIONS = ("server", "optimizer")
_SIMPLE_KEYS = (
    "timezone", "git_binary", "git_timeout_seconds", "max_files_per_author", "top_files", "template",
)


def get_config_path() -> Path:
    """Get path to config file."""
    override = os.environ.get("GITREPORT_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gitreport" / "config.json"


def load_config() -> Dict[str, Any]:
    """
    Load configuration from file, merging with defaults.

    Returns a complete configuration with all default values filled in.
    User config overrides defaults where specified; environment variables
    override both.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = json.load(f)

            # Shallow merge nested sections
            for key in _SECTIONS:
                if key in user_config and isinstance(user_config[key], dict):
                    config[key].update(user_config[key])

            # Direct override for simple values
            for key in _SIMPLE_KEYS:
                if key in user_config:
                    config[key] = user_config[key]

        except json.JSONDecodeError as e:
            logger.warning("Could not parse config file %s: %s", config_path, e)
        except OSError as e:
            logger.warning("Error loading config %s: %s", config_path, e)

    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: Dict[str, Any]) -> None:
    port = os.environ.get("PORT")
    if port:
        try:
            config["server"]["port"] = int(port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", port)

    if os.environ.get("AI_API_URL"):
        config["optimizer"]["api_url"] = os.environ["AI_API_URL"]
    if os.environ.get("AI_API_KEY"):
        config["optimizer"]["api_key"] = os.environ["AI_API_KEY"]


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def get_timezone(config: Dict[str, Any]) -> str:
    """
    Get the configured report timezone name.

    Raises:
        InvalidInput: the configured zone is not a known IANA name
    """
    name = config.get("timezone") or "UTC"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInput(f"Unknown timezone '{name}' in configuration", field="timezone")
    return name


def get_git_timeout(config: Dict[str, Any]) -> Optional[float]:
    """Get git read deadline in seconds, None when disabled."""
    timeout = config.get("git_timeout_seconds")
    if not timeout or timeout <= 0:
        return None
    return float(timeout)
