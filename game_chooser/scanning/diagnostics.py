"""Operator-facing diagnostics for catalog scans.

Every non-fatal failure of a scan is reported here. Reports are logged and kept so the
caller (UI, CLI, tests) can show what was skipped and why. Reporting never changes control
flow.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

# Oldest reports are dropped first once a sink holds this many.
DEFAULT_MAX_REPORTS = 1000


class DiagnosticKind(str, Enum):
    SOURCE_UNREADABLE = "source_unreadable"
    ARCHIVE_UNREADABLE = "archive_unreadable"
    CORRUPT_ARCHIVE = "corrupt_archive"
    VERSION_MISMATCH = "version_mismatch"
    MALFORMED_DESCRIPTOR = "malformed_descriptor"
    DESCRIPTOR_ERROR = "descriptor_error"
    RECOVERY_FAILED = "recovery_failed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


_LEVELS = {
    DiagnosticKind.SOURCE_UNREADABLE: logging.WARNING,
    DiagnosticKind.ARCHIVE_UNREADABLE: logging.WARNING,
    DiagnosticKind.CORRUPT_ARCHIVE: logging.ERROR,
    DiagnosticKind.VERSION_MISMATCH: logging.INFO,
    DiagnosticKind.MALFORMED_DESCRIPTOR: logging.WARNING,
    DiagnosticKind.DESCRIPTOR_ERROR: logging.WARNING,
    DiagnosticKind.RECOVERY_FAILED: logging.ERROR,
    DiagnosticKind.CANCELLED: logging.INFO,
    DiagnosticKind.TIMEOUT: logging.WARNING,
}


@dataclass(frozen=True)
class DiagnosticReport:
    kind: DiagnosticKind
    source: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        if self.line is not None:
            return f"{self.message} ({self.source} line:{self.line} column:{self.column})"
        return f"{self.message} ({self.source})"

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload


class ScanDiagnostics:
    """Thread-safe sink for diagnostic reports.

    Keeps at most `max_reports` reports. A sink built with `parent` also forwards every
    report to that longer-lived sink without logging it a second time.
    """

    def __init__(
        self,
        on_report: Optional[Callable[[DiagnosticReport], None]] = None,
        max_reports: int = DEFAULT_MAX_REPORTS,
        parent: Optional["ScanDiagnostics"] = None,
    ) -> None:
        self._reports: Deque[DiagnosticReport] = deque(maxlen=max_reports)
        self._lock = threading.Lock()
        self._on_report = on_report
        self._parent = parent

    def report(
        self,
        kind: DiagnosticKind,
        source: object,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        exc_info: bool = False,
    ) -> DiagnosticReport:
        entry = DiagnosticReport(kind=kind, source=str(source), message=message, line=line, column=column)
        logger.log(
            _LEVELS.get(kind, logging.WARNING),
            "%s",
            entry.describe(),
            exc_info=exc_info,
            extra={"diagnostic": entry.to_dict()},
        )
        self.add(entry)
        return entry

    def add(self, entry: DiagnosticReport) -> None:
        """Store an already logged report and pass it on."""
        with self._lock:
            self._reports.append(entry)
        if self._on_report is not None:
            try:
                self._on_report(entry)
            except Exception:
                logger.exception("Diagnostic listener failed")
        if self._parent is not None:
            self._parent.add(entry)

    def child(self) -> "ScanDiagnostics":
        """A fresh sink for one scan that forwards into this one."""
        return ScanDiagnostics(max_reports=self._reports.maxlen or DEFAULT_MAX_REPORTS, parent=self)

    @property
    def reports(self) -> List[DiagnosticReport]:
        with self._lock:
            return list(self._reports)

    def of_kind(self, kind: DiagnosticKind) -> List[DiagnosticReport]:
        return [report for report in self.reports if report.kind is kind]

    def has(self, kind: DiagnosticKind) -> bool:
        return bool(self.of_kind(kind))

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()
