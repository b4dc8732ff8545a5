"""Minimal Qt game chooser window: a list of games, a status line and a Refresh button."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from ..config import Config
from .compat import load_qt, qt_signal_slot
from .catalog_list_model import build_catalog_list_model
from .qt_interaction import build_qt_interaction

logger = logging.getLogger(__name__)


def run(config: Optional[Config] = None) -> int:
    QtWidgets, QtCore, binding = load_qt()
    Signal, _Slot = qt_signal_slot(QtCore)

    from ..app.api import CancelToken, CatalogService, start_catalog_scan_async

    config = config or Config()
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)

    window = QtWidgets.QMainWindow()
    window.setWindowTitle("Game Chooser")
    central = QtWidgets.QWidget(window)
    layout = QtWidgets.QVBoxLayout(central)
    list_view = QtWidgets.QListView(central)
    status = QtWidgets.QLabel("Scanning maps...", central)
    refresh_button = QtWidgets.QPushButton("Refresh", central)
    layout.addWidget(list_view)
    layout.addWidget(status)
    layout.addWidget(refresh_button)
    window.setCentralWidget(central)

    _channel, executor = build_qt_interaction(
        QtCore, QtWidgets, window, default_no=config.model.ui.confirm_default_no
    )
    service = CatalogService(config, interaction=executor)
    CatalogListModel = build_catalog_list_model(QtCore)
    list_model = CatalogListModel(service.model, window)
    list_view.setModel(list_model)

    class _ScanBridge(QtCore.QObject):
        finished = Signal(object)
        failed = Signal(str)

    bridge = _ScanBridge()
    state = {"handle": None}

    def _on_finished(report) -> None:
        stats = report.stats()
        suffix = " (timed out)" if report.timed_out else ""
        status.setText(f"{stats['entries']} games, {stats['diagnostics']} problems{suffix}")
        refresh_button.setEnabled(True)

    def _on_failed(message: str) -> None:
        status.setText(f"Scan failed: {message}")
        refresh_button.setEnabled(True)

    bridge.finished.connect(_on_finished)
    bridge.failed.connect(_on_failed)

    def _start_scan() -> None:
        refresh_button.setEnabled(False)
        status.setText("Scanning maps...")
        state["handle"] = start_catalog_scan_async(
            service,
            CancelToken(),
            on_finished=bridge.finished.emit,
            on_failed=lambda exc: bridge.failed.emit(str(exc)),
        )

    def _on_quit() -> None:
        handle = state["handle"]
        if handle is not None and handle.is_running():
            handle.cancel()
        list_model.detach()
        service.close()

    refresh_button.clicked.connect(_start_scan)
    app.aboutToQuit.connect(_on_quit)

    logger.info("Starting Qt chooser (%s)", binding)
    window.resize(480, 640)
    window.show()
    _start_scan()
    return int(app.exec() if hasattr(app, "exec") else app.exec_())
