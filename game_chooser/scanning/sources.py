"""Map source discovery.

Lists the candidate map sources (loose directories and ``.zip`` archives) directly inside
the user maps folder and the bundled maps folder. Only one level is listed; the per-source
readers look inside.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .diagnostics import DiagnosticKind, ScanDiagnostics

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


class SourceKind(str, Enum):
    DIRECTORY = "directory"
    ARCHIVE = "archive"


class SourcePriority(IntEnum):
    # Higher wins.
    DEFAULT_ROOT = 0
    USER_ROOT = 1


@dataclass(frozen=True)
class GameSource:
    path: Path
    kind: SourceKind
    priority: SourcePriority

    @property
    def is_archive(self) -> bool:
        return self.kind is SourceKind.ARCHIVE


def safe_list_dir(
    folder: Optional[Union[str, Path]],
    diagnostics: Optional[ScanDiagnostics] = None,
) -> List[Path]:
    """List a folder one level deep; missing or unreadable folders give []."""
    if folder is None:
        return []
    path = Path(folder)
    try:
        return sorted(path.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        logger.debug("Maps folder does not exist: %s", path)
        return []
    except OSError as exc:
        if diagnostics is not None:
            diagnostics.report(DiagnosticKind.SOURCE_UNREADABLE, path, f"Cannot list maps folder: {exc}")
        else:
            logger.warning("Cannot list maps folder %s: %s", path, exc)
        return []


def classify_source(path: Path, priority: SourcePriority) -> Optional[GameSource]:
    """Return a GameSource for directories and ``.zip`` files, None for anything else."""
    try:
        if path.is_dir():
            return GameSource(path.absolute(), SourceKind.DIRECTORY, priority)
        if path.is_file() and path.name.lower().endswith(ARCHIVE_SUFFIX):
            return GameSource(path.absolute(), SourceKind.ARCHIVE, priority)
    except OSError as exc:
        logger.debug("Ignoring %s: %s", path, exc)
    return None


def enumerate_sources(
    user_root: Optional[Union[str, Path]],
    default_root: Optional[Union[str, Path]],
    diagnostics: Optional[ScanDiagnostics] = None,
) -> List[GameSource]:
    """User-root sources first, then default-root sources; duplicates are kept."""
    roots: Sequence[tuple] = (
        (user_root, SourcePriority.USER_ROOT),
        (default_root, SourcePriority.DEFAULT_ROOT),
    )
    sources: List[GameSource] = []
    for root, priority in roots:
        for entry in safe_list_dir(root, diagnostics):
            source = classify_source(entry, priority)
            if source is not None:
                sources.append(source)
    logger.debug("Enumerated %d map sources", len(sources))
    return sources
