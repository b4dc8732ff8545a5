"""Version utilities for Game Chooser."""

from __future__ import annotations

import re
from typing import Tuple

__version__ = "1.0.0"

# Highest game engine version the bundled descriptor parser understands.
ENGINE_VERSION = "1.9.0"

_VERSION_PART = re.compile(r"\d+")


def load_version() -> str:
    return __version__


def parse_version(text: str) -> Tuple[int, ...]:
    """Turn "1.8.0.3" or "1.9-beta" into a comparable tuple of ints.

    Missing parts compare as zero, so "1.9" == "1.9.0".
    """
    parts = [int(part) for part in _VERSION_PART.findall(str(text or ""))]
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def is_engine_compatible(required: str, engine: str = ENGINE_VERSION) -> bool:
    return parse_version(required) <= parse_version(engine)
