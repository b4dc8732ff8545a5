"""Config I/O utilities."""

from __future__ import annotations

import json
import os
import logging
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigurationError
from .schema import validate_config_schema

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GAME_CHOOSER_CONFIG"
YAML_SUFFIXES = (".yaml", ".yml")


def _is_yaml(config_path: str) -> bool:
    return config_path.lower().endswith(YAML_SUFFIXES)


def get_config_path() -> str:
    env_path = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env_path:
        return env_path
    return os.path.join(os.path.expanduser("~"), ".game_chooser", "config.json")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON or YAML config file.

    A missing file yields an empty dict (all defaults). A file that exists but cannot be
    parsed, or fails schema validation, raises ConfigurationError.
    """
    if config_path is None:
        config_path = get_config_path()
    config_path = str(config_path)
    if not os.path.exists(config_path):
        logger.debug("No config file at %s, using defaults", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if _is_yaml(config_path):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not read config: {exc}", file_path=config_path) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be a mapping", file_path=config_path)

    ok, error = validate_config_schema(data)
    if not ok:
        raise ConfigurationError(f"Config schema validation failed: {error}", "CONFIG_SCHEMA", config_path)
    return data


def save_config(config_data: Dict[str, Any], config_path: Optional[str] = None) -> bool:
    if config_path is None:
        config_path = get_config_path()
    config_path = str(config_path)
    try:
        parent = os.path.dirname(config_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        data = dict(config_data or {})
        with open(config_path, "w", encoding="utf-8") as f:
            if _is_yaml(config_path):
                yaml.safe_dump(data, f, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
        return True
    except OSError as exc:
        logger.warning("Could not save config to %s: %s", config_path, exc)
        return False
