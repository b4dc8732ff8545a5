"""Turns descriptor URIs into catalog entries.

`DescriptorIngestor.ingest` never raises: every parser failure is classified, reported to
the diagnostics channel and converted into "no entry".
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..catalog.model import CatalogEntry
from ..core.descriptor import DescriptorParser, XmlDescriptorParser
from ..exceptions import DescriptorParseError, EngineVersionError
from .diagnostics import DiagnosticKind, ScanDiagnostics

logger = logging.getLogger(__name__)


class DescriptorIngestor:
    def __init__(
        self,
        parser: Optional[DescriptorParser] = None,
        diagnostics: Optional[ScanDiagnostics] = None,
    ) -> None:
        self.parser = parser or XmlDescriptorParser()
        self.diagnostics = diagnostics or ScanDiagnostics()

    def ingest(self, uri: str, source_priority: int = 0) -> Optional[CatalogEntry]:
        try:
            descriptor = self.parser.parse(uri)
        except EngineVersionError as exc:
            self.diagnostics.report(DiagnosticKind.VERSION_MISMATCH, uri, str(exc))
            return None
        except DescriptorParseError as exc:
            self.diagnostics.report(
                DiagnosticKind.MALFORMED_DESCRIPTOR,
                uri,
                "Could not parse descriptor",
                line=exc.line,
                column=exc.column,
            )
            return None
        except Exception as exc:
            self.diagnostics.report(
                DiagnosticKind.DESCRIPTOR_ERROR,
                uri,
                f"Could not parse descriptor: {exc}",
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            return None

        if descriptor is None:
            return None
        return CatalogEntry.from_descriptor(descriptor, source_priority)

    def ingest_into(self, entries: List[CatalogEntry], uri: str, source_priority: int = 0) -> Optional[CatalogEntry]:
        """Ingest `uri` and append the entry unless an equal one is already present."""
        entry = self.ingest(uri, source_priority)
        if entry is None:
            return None
        if entry in entries:
            logger.debug("Duplicate game %r at %s ignored", entry.name, uri)
            return None
        entries.append(entry)
        return entry
