#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""Game Chooser - catalog scan coordinator.

Scans every map source under the user and default maps folders on a bounded thread pool
and collects the parsed games into one shared accumulator.

Notes:
- Pool size is half the CPU count (minimum one) unless configured; more workers mostly
  contend on the disk and the accumulator.
- Cancellation is checked before each dispatch; tasks already submitted run to the end.
- The coordinator waits at most `shutdown_timeout` for running tasks, then returns what
  has been collected. Late results are dropped.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..app.models import CancelToken, ScanReport, ScanState
from ..catalog.model import CatalogEntry
from ..config.models import (
    DEFAULT_DESCRIPTOR_FOLDER,
    DEFAULT_SHUTDOWN_TIMEOUT_SEC,
    normalize_descriptor_folder,
)
from ..core.descriptor import DescriptorParser
from ..exceptions import ScannerError
from ..logging_config import LoggingTimer
from .archive_reader import read_archive
from .diagnostics import DiagnosticKind, ScanDiagnostics
from .directory_reader import read_directory
from .ingestor import DescriptorIngestor
from .recovery import CorruptionRecoveryGate
from .sources import GameSource, enumerate_sources

logger = logging.getLogger(__name__)

MAX_WORKERS = 32


def resolve_worker_count(configured: int = 0, cpu_count: Optional[int] = None) -> int:
    if configured and configured > 0:
        return min(MAX_WORKERS, configured)
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return min(MAX_WORKERS, max(1, cpus // 2))


class EntryAccumulator:
    """Thread-safe collection of catalog entries keyed by game identity.

    On a collision the entry from the higher priority source is kept; between equal
    priorities the last writer wins. After `close()` further writes are dropped.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CatalogEntry] = {}
        self._lock = threading.Lock()
        self._closed = False
        self.dropped_writes = 0

    def add_all(self, entries: List[CatalogEntry]) -> int:
        added = 0
        with self._lock:
            if self._closed:
                self.dropped_writes += len(entries)
                return 0
            for entry in entries:
                current = self._entries.get(entry.identity)
                if current is not None and current.source_priority > entry.source_priority:
                    continue
                self._entries[entry.identity] = entry
                added += 1
        return added

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def snapshot(self) -> List[CatalogEntry]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ScanCoordinator:
    """Idle -> Scanning -> Completed | Cancelled."""

    def __init__(
        self,
        user_root: Optional[Union[str, Path]],
        default_root: Optional[Union[str, Path]],
        parser: Optional[DescriptorParser] = None,
        recovery_gate: Optional[CorruptionRecoveryGate] = None,
        diagnostics: Optional[ScanDiagnostics] = None,
        max_workers: int = 0,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SEC,
        descriptor_folder: str = DEFAULT_DESCRIPTOR_FOLDER,
    ) -> None:
        self.user_root = Path(user_root) if user_root else None
        self.default_root = Path(default_root) if default_root else None
        self.diagnostics = diagnostics or ScanDiagnostics()
        self.parser = parser
        self.recovery_gate = recovery_gate
        self.max_workers = resolve_worker_count(max_workers)
        self.shutdown_timeout = float(shutdown_timeout)
        self.descriptor_folder = normalize_descriptor_folder(descriptor_folder)
        self.state = ScanState.IDLE
        self._scan_lock = threading.Lock()

    def _scan_source(self, source: GameSource, accumulator: EntryAccumulator, ingestor: DescriptorIngestor) -> int:
        try:
            if source.is_archive:
                entries = read_archive(source, ingestor, self.recovery_gate, self.descriptor_folder).entries
            else:
                entries = read_directory(source, ingestor, self.descriptor_folder)
        except Exception as exc:
            error = ScannerError(f"Scanning failed: {exc}", file_path=str(source.path), scanner_name=source.kind.value)
            ingestor.diagnostics.report(DiagnosticKind.SOURCE_UNREADABLE, source.path, str(error), exc_info=True)
            return 0
        return accumulator.add_all(entries)

    def scan(self, cancel_token: Optional[CancelToken] = None) -> ScanReport:
        """Scan both roots and return the collected entries (unsorted).

        Never raises for problems with individual sources; those end up in diagnostics.
        Each scan reports into its own sink, so tasks a timed-out scan left running
        never show up in a later scan's report.
        """
        with self._scan_lock:
            return self._scan(cancel_token)

    def _scan(self, cancel_token: Optional[CancelToken]) -> ScanReport:
        self.state = ScanState.IDLE
        diagnostics = self.diagnostics.child()
        ingestor = DescriptorIngestor(self.parser, diagnostics)
        if self.recovery_gate is not None:
            self.recovery_gate.start_session()

        with LoggingTimer("catalog.scan") as timer:
            sources = enumerate_sources(self.user_root, self.default_root, diagnostics)
            accumulator = EntryAccumulator()
            futures: List[concurrent.futures.Future] = []
            cancelled = False

            self.state = ScanState.SCANNING
            logger.info("Scanning %d map sources with %d workers", len(sources), self.max_workers)
            executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="map-scan",
            )
            try:
                for source in sources:
                    if cancel_token is not None and cancel_token.is_cancelled():
                        cancelled = True
                        break
                    futures.append(executor.submit(self._scan_source, source, accumulator, ingestor))
            finally:
                # Running tasks are never interrupted; a timeout only stops the wait.
                executor.shutdown(wait=False)

            done, pending = concurrent.futures.wait(futures, timeout=self.shutdown_timeout)
            accumulator.close()
            timed_out = bool(pending)

        if cancelled:
            self.state = ScanState.CANCELLED
            diagnostics.report(
                DiagnosticKind.CANCELLED,
                self.user_root or self.default_root or "<none>",
                f"Scan cancelled after dispatching {len(futures)} of {len(sources)} sources",
            )
        else:
            self.state = ScanState.COMPLETED
        if timed_out:
            diagnostics.report(
                DiagnosticKind.TIMEOUT,
                self.user_root or self.default_root or "<none>",
                f"Gave up waiting after {self.shutdown_timeout:.0f}s; "
                f"{len(pending)} of {len(futures)} sources still running",
            )

        entries = accumulator.snapshot()
        logger.info(
            "Scan %s: %d games from %d/%d sources in %.2fs%s",
            self.state.value, len(entries), len(done), len(sources), timer.duration,
            " (timed out)" if timed_out else "",
        )
        return ScanReport(
            entries=entries,
            state=self.state,
            total_sources=len(sources),
            dispatched=len(futures),
            timed_out=timed_out,
            duration_seconds=timer.duration,
            diagnostics=diagnostics.reports,
        )
