"""Game catalog: the deduplicated, sorted list of playable games."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, List, Optional, Tuple

from ..core.descriptor import GameDescriptor

if TYPE_CHECKING:
    from ..app.models import CancelToken, ScanReport
    from ..scanning.coordinator import ScanCoordinator

logger = logging.getLogger(__name__)

CatalogListener = Callable[[str, Optional["CatalogEntry"]], None]

EVENT_RESET = "reset"
EVENT_REMOVED = "removed"


@dataclass(frozen=True, eq=False)
class CatalogEntry:
    """A parsed game descriptor as shown in the chooser.

    Two entries are equal when their game names are equal; the URI only records where
    the game was found.
    """

    name: str
    uri: str
    descriptor: Optional[GameDescriptor] = field(default=None, repr=False)
    source_priority: int = 0

    @classmethod
    def from_descriptor(cls, descriptor: GameDescriptor, source_priority: int = 0) -> "CatalogEntry":
        return cls(name=descriptor.name, uri=descriptor.uri, descriptor=descriptor,
                   source_priority=int(source_priority))

    @property
    def identity(self) -> str:
        return self.name

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.name.casefold(), self.name, self.uri)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogEntry):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


def sort_entries(entries: Iterable[CatalogEntry]) -> List[CatalogEntry]:
    """Drop duplicates (first one kept) and sort case-insensitively by name."""
    unique: dict = {}
    for entry in entries:
        unique.setdefault(entry.identity, entry)
    return sorted(unique.values(), key=CatalogEntry.sort_key)


class CatalogModel:
    """The long-lived, observable holder of the catalog."""

    def __init__(self, entries: Optional[Iterable[CatalogEntry]] = None) -> None:
        self._entries: List[CatalogEntry] = []
        self._lock = threading.RLock()
        self._listeners: List[CatalogListener] = []
        self.last_report: Optional["ScanReport"] = None
        if entries is not None:
            self.build(entries)

    def add_listener(self, listener: CatalogListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CatalogListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, entry: Optional[CatalogEntry] = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, entry)
            except Exception:
                logger.exception("Catalog listener failed on %s", event)

    def build(self, entries: Iterable[CatalogEntry]) -> List[CatalogEntry]:
        """Replace the catalog with `entries`, deduplicated and sorted once."""
        ordered = sort_entries(entries)
        with self._lock:
            self._entries = ordered
        self._notify(EVENT_RESET)
        return list(ordered)

    def populate(
        self,
        coordinator: "ScanCoordinator",
        cancel_token: Optional["CancelToken"] = None,
    ) -> "ScanReport":
        """Run a scan with `coordinator` and rebuild the catalog from its result."""
        report = coordinator.scan(cancel_token=cancel_token)
        self.build(report.entries)
        self.last_report = report
        return report

    def find_by_name(self, name: str) -> Optional[CatalogEntry]:
        with self._lock:
            for entry in self._entries:
                if entry.name == name:
                    return entry
        return None

    def remove(self, entry: CatalogEntry) -> bool:
        with self._lock:
            try:
                index = self._entries.index(entry)
            except ValueError:
                return False
            removed = self._entries.pop(index)
        self._notify(EVENT_REMOVED, removed)
        return True

    def index_of(self, entry: CatalogEntry) -> int:
        with self._lock:
            try:
                return self._entries.index(entry)
            except ValueError:
                return -1

    def get(self, index: int) -> CatalogEntry:
        with self._lock:
            return self._entries[index]

    def entries(self) -> List[CatalogEntry]:
        with self._lock:
            return list(self._entries)

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries()]

    def __getitem__(self, index: int) -> CatalogEntry:
        return self.get(index)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries())

    def __contains__(self, entry: object) -> bool:
        with self._lock:
            return entry in self._entries
