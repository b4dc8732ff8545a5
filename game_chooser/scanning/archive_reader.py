"""Reads game descriptors out of a zip map archive.

Only members under the descriptor folder (``games/`` by default) ending in ``.xml`` are
considered. If any of them cannot be resolved the archive is corrupt: reading stops, no
entries from it are kept, and the recovery gate is asked to deal with the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..catalog.model import CatalogEntry
from ..config.models import DEFAULT_DESCRIPTOR_FOLDER, normalize_descriptor_folder
from ..core.resources import ZipResourceRoot, encode_uri_spaces
from ..exceptions import ArchiveError, CorruptArchiveError
from .diagnostics import DiagnosticKind
from .ingestor import DescriptorIngestor
from .recovery import CorruptionRecoveryGate
from .sources import GameSource

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".xml"


@dataclass
class ArchiveReadResult:
    entries: List[CatalogEntry] = field(default_factory=list)
    corrupt: bool = False
    corrupt_entry: Optional[str] = None
    opened: bool = True


def is_descriptor_member(name: str, descriptor_folder: str = DEFAULT_DESCRIPTOR_FOLDER) -> bool:
    prefix = normalize_descriptor_folder(descriptor_folder)
    return name.startswith(prefix) and name.lower().endswith(DESCRIPTOR_SUFFIX)


def _collect_entries(
    root: ZipResourceRoot,
    source: GameSource,
    ingestor: DescriptorIngestor,
    descriptor_folder: str,
) -> List[CatalogEntry]:
    entries: List[CatalogEntry] = []
    for name in root.entry_names():
        if not is_descriptor_member(name, descriptor_folder):
            continue
        uri = root.resolve(name)
        if uri is None:
            raise CorruptArchiveError(
                f"Archive entry {name} cannot be read",
                archive_path=str(source.path),
                entry_name=name,
            )
        ingestor.ingest_into(entries, encode_uri_spaces(uri), source.priority)
    return entries


def read_archive(
    source: GameSource,
    ingestor: DescriptorIngestor,
    recovery_gate: Optional[CorruptionRecoveryGate] = None,
    descriptor_folder: str = DEFAULT_DESCRIPTOR_FOLDER,
) -> ArchiveReadResult:
    diagnostics = ingestor.diagnostics

    try:
        with ZipResourceRoot(source.path) as root:
            return ArchiveReadResult(entries=_collect_entries(root, source, ingestor, descriptor_folder))
    except CorruptArchiveError as exc:
        # The archive handle is closed here, so the file can be deleted.
        diagnostics.report(DiagnosticKind.CORRUPT_ARCHIVE, source.path, str(exc))
        if recovery_gate is not None:
            recovery_gate.handle(source.path, diagnostics)
        return ArchiveReadResult(corrupt=True, corrupt_entry=exc.entry_name)
    except ArchiveError as exc:
        diagnostics.report(DiagnosticKind.ARCHIVE_UNREADABLE, source.path, str(exc))
        return ArchiveReadResult(opened=False)
