"""Shared dataclasses for app controllers."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from ..catalog.model import CatalogEntry
    from ..scanning.diagnostics import DiagnosticReport


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def event(self) -> threading.Event:
        return self._event

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ScanReport:
    entries: List["CatalogEntry"]
    state: ScanState
    total_sources: int
    dispatched: int
    timed_out: bool = False
    duration_seconds: float = 0.0
    diagnostics: List["DiagnosticReport"] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.state is ScanState.CANCELLED

    @property
    def clean(self) -> bool:
        return self.state is ScanState.COMPLETED and not self.timed_out

    def stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "entries": len(self.entries),
            "total_sources": self.total_sources,
            "dispatched": self.dispatched,
            "timed_out": self.timed_out,
            "duration_seconds": round(self.duration_seconds, 3),
            "diagnostics": len(self.diagnostics),
        }
