"""Configuration management for wsh. Reads settings from ~/.wsh.json."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from wsh.history import DEFAULT_HISTORY_SIZE
from wsh.keybindings import DEFAULT_INPUT_KEYBINDINGS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WSH_CONFIG"
CONFIG_FILE_NAME = ".wsh.json"
DEFAULT_PROMPT = "➜ {cwd} $ "


@dataclass
class ShellConfig:
    prompt: str = DEFAULT_PROMPT
    history_size: int = DEFAULT_HISTORY_SIZE
    enable_colors: bool = True
    aliases: dict[str, str] = field(default_factory=dict)
    keybindings: dict[str, str | list[str]] = field(default_factory=dict)


def config_from_dict(data: dict) -> ShellConfig:
    """Deserialize a ShellConfig from a JSON-compatible dict.

    Missing keys keep their defaults and unknown keys are ignored. Values of
    the wrong type raise ``ValueError``.
    """
    if not isinstance(data, dict):
        raise ValueError("top-level value must be an object")

    config = ShellConfig()

    if "prompt" in data:
        if not isinstance(data["prompt"], str):
            raise ValueError("'prompt' must be a string")
        config.prompt = data["prompt"]

    if "history_size" in data:
        size = data["history_size"]
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ValueError("'history_size' must be a positive integer")
        config.history_size = size

    if "enable_colors" in data:
        if not isinstance(data["enable_colors"], bool):
            raise ValueError("'enable_colors' must be true or false")
        config.enable_colors = data["enable_colors"]

    aliases = data.get("aliases", {})
    if not isinstance(aliases, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in aliases.items()
    ):
        raise ValueError("'aliases' must map names to command strings")
    config.aliases = dict(aliases)

    keybindings = data.get("keybindings", {})
    if not isinstance(keybindings, dict):
        raise ValueError("'keybindings' must be an object")
    for action, keys in keybindings.items():
        if action not in DEFAULT_INPUT_KEYBINDINGS:
            raise ValueError(f"unknown keybinding action: {action}")
        key_list = keys if isinstance(keys, list) else [keys]
        if not key_list or not all(isinstance(key, str) and key for key in key_list):
            raise ValueError(f"keys for '{action}' must be a key name or a list of key names")
    config.keybindings = dict(keybindings)

    return config


def _get_config_path() -> Path | None:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    default = Path.home() / CONFIG_FILE_NAME
    return default if default.exists() else None


def load_config(path: str | os.PathLike[str] | None = None) -> ShellConfig:
    """Load the shell configuration.

    An explicit *path* that does not exist is reported and defaults are used.
    Without one, ``$WSH_CONFIG`` is read if set, then ``~/.wsh.json`` if
    present. Unreadable or malformed files fall back to the defaults.
    """
    config_path = Path(path).expanduser() if path is not None else _get_config_path()
    if config_path is None:
        return ShellConfig()

    if not config_path.exists():
        logger.warning("config file %s not found, using defaults", config_path)
        print(f"Config file {config_path} not found, using defaults", file=sys.stderr)
        return ShellConfig()

    try:
        data = json.loads(config_path.read_text())
        config = config_from_dict(data)
    except (OSError, ValueError) as e:
        logger.error("failed to load config %s: %s", config_path, e)
        print(f"Error reading config: {e}", file=sys.stderr)
        return ShellConfig()

    logger.debug("loaded config from %s", config_path)
    return config
