#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""Game Chooser - configuration package.

Raw config lives in a plain dict (what was read from disk); `Config.model` gives the
validated pydantic view that the rest of the application reads from.
"""

import logging
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError
from .io import get_config_path, load_config as load_config_data, save_config
from .models import ChooserConfig, validate_config
from .paths import get_default_maps_dir, get_root_folder, get_user_maps_folder
from .schema import validate_config_schema

logger = logging.getLogger(__name__)

ConfigError = ConfigurationError


class Config:
    """Mutable config wrapper with a validated model view."""

    def __init__(self, config_data: Optional[Dict[str, Any]] = None):
        self.config_data = dict(config_data or {})
        self._model: Optional[ChooserConfig] = None

    @classmethod
    def from_file(cls, config_path: Optional[str] = None) -> "Config":
        return cls(load_config_data(config_path))

    def get(self, key, default=None):
        return self.config_data.get(key, default)

    def set(self, key, value) -> None:
        self.config_data[key] = value
        self._model = None

    def section(self, key: str) -> Dict[str, Any]:
        value = self.config_data.get(key)
        if not isinstance(value, dict):
            value = {}
            self.config_data[key] = value
            self._model = None
        return value

    def set_in(self, section: str, key: str, value: Any) -> None:
        self.section(section)[key] = value
        self._model = None

    @property
    def model(self) -> ChooserConfig:
        if self._model is None:
            self._model = validate_config(self.config_data)
        return self._model

    def save(self, config_path: Optional[str] = None) -> bool:
        return save_config(self.config_data, config_path)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration; raises ConfigurationError on bad files."""
    config = Config.from_file(config_path)
    logger.debug("Loaded config (scanner=%s)", config.model.scanner)
    return config


__all__ = [
    'ChooserConfig',
    'Config',
    'ConfigError',
    'ConfigurationError',
    'get_config_path',
    'get_default_maps_dir',
    'get_root_folder',
    'get_user_maps_folder',
    'load_config',
    'save_config',
    'validate_config',
    'validate_config_schema',
]
