"""Qt list model over a CatalogModel (lazy Qt binding)."""

from __future__ import annotations

from typing import Any, Optional

from ..catalog.model import EVENT_REMOVED, CatalogEntry, CatalogModel
from .compat import qt_signal_slot


def build_catalog_list_model(QtCore: Any) -> type:
    """Create CatalogListModel bound to the provided QtCore."""
    Signal, Slot = qt_signal_slot(QtCore)

    class CatalogListModel(QtCore.QAbstractListModel):
        EntryRole = QtCore.Qt.ItemDataRole.UserRole + 1

        # Catalog events may fire on scan threads; rows only change on the model's thread.
        catalogChanged = Signal(str, object)

        def __init__(self, catalog: CatalogModel, parent=None) -> None:
            super().__init__(parent)
            self._catalog = catalog
            self._rows = catalog.entries()
            self.catalogChanged.connect(self._apply_event, QtCore.Qt.ConnectionType.QueuedConnection)
            catalog.add_listener(self._on_catalog_event)

        def detach(self) -> None:
            self._catalog.remove_listener(self._on_catalog_event)

        def _on_catalog_event(self, event: str, entry: Optional[CatalogEntry]) -> None:
            self.catalogChanged.emit(event, entry)

        @Slot(str, object)
        def _apply_event(self, event: str, entry: Optional[CatalogEntry]) -> None:
            if event == EVENT_REMOVED and entry is not None and entry in self._rows:
                row = self._rows.index(entry)
                self.beginRemoveRows(QtCore.QModelIndex(), row, row)
                self._rows.pop(row)
                self.endRemoveRows()
                return
            self.beginResetModel()
            self._rows = self._catalog.entries()
            self.endResetModel()

        def rowCount(self, parent=QtCore.QModelIndex()) -> int:
            if parent.isValid():
                return 0
            return len(self._rows)

        def data(self, index, role=QtCore.Qt.ItemDataRole.DisplayRole):
            if not index.isValid() or not (0 <= index.row() < len(self._rows)):
                return None
            entry = self._rows[index.row()]
            if role == QtCore.Qt.ItemDataRole.DisplayRole:
                return entry.name
            if role == QtCore.Qt.ItemDataRole.ToolTipRole:
                return entry.uri
            if role == self.EntryRole:
                return entry
            return None

        def entry_at(self, row: int) -> Optional[CatalogEntry]:
            if 0 <= row < len(self._rows):
                return self._rows[row]
            return None

    return CatalogListModel
