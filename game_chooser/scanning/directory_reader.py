"""Reads game descriptors from a loose map directory (``<map>/games/*.xml``)."""

from __future__ import annotations

import logging
from typing import List

from ..catalog.model import CatalogEntry
from ..config.models import DEFAULT_DESCRIPTOR_FOLDER
from .diagnostics import DiagnosticKind
from .ingestor import DescriptorIngestor
from .sources import GameSource

logger = logging.getLogger(__name__)


def read_directory(
    source: GameSource,
    ingestor: DescriptorIngestor,
    descriptor_folder: str = DEFAULT_DESCRIPTOR_FOLDER,
) -> List[CatalogEntry]:
    entries: List[CatalogEntry] = []
    games_dir = source.path / descriptor_folder.strip("/")
    if not games_dir.is_dir():
        logger.debug("No games folder in %s", source.path)
        return entries

    try:
        candidates = sorted(games_dir.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        ingestor.diagnostics.report(DiagnosticKind.SOURCE_UNREADABLE, games_dir, f"Cannot list games folder: {exc}")
        return entries

    for game in candidates:
        if game.is_file() and game.name.lower().endswith(".xml"):
            ingestor.ingest_into(entries, game.absolute().as_uri(), source.priority)
    return entries
