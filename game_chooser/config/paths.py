"""Root and maps folder resolution.

Priority for every folder: explicit config value, then environment override, then the
built-in default.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .models import ChooserConfig

ROOT_ENV_VAR = "GAME_CHOOSER_ROOT"
USER_MAPS_ENV_VAR = "GAME_CHOOSER_USER_MAPS"
DEFAULT_MAPS_ENV_VAR = "GAME_CHOOSER_DEFAULT_MAPS"

MAPS_FOLDER_NAME = "maps"
USER_HOME_FOLDER_NAME = ".game_chooser"
USER_MAPS_FOLDER_NAME = "downloadedMaps"


def _env_path(name: str) -> Optional[Path]:
    value = (os.environ.get(name) or "").strip()
    return Path(value).expanduser() if value else None


def _config_path(value: Optional[str]) -> Optional[Path]:
    if value:
        return Path(value).expanduser()
    return None


def get_root_folder(config: Optional[ChooserConfig] = None) -> Path:
    """Installation root; bundled maps live under `<root>/maps`."""
    paths = config.paths if config is not None else None
    return (
        _config_path(paths.root_folder if paths else None)
        or _env_path(ROOT_ENV_VAR)
        or Path.cwd()
    ).resolve()


def get_user_maps_folder(config: Optional[ChooserConfig] = None) -> Path:
    paths = config.paths if config is not None else None
    return (
        _config_path(paths.user_maps_folder if paths else None)
        or _env_path(USER_MAPS_ENV_VAR)
        or Path.home() / USER_HOME_FOLDER_NAME / USER_MAPS_FOLDER_NAME
    ).resolve()


def get_default_maps_dir(config: Optional[ChooserConfig] = None) -> Path:
    paths = config.paths if config is not None else None
    return (
        _config_path(paths.default_maps_folder if paths else None)
        or _env_path(DEFAULT_MAPS_ENV_VAR)
        or get_root_folder(config) / MAPS_FOLDER_NAME
    ).resolve()
