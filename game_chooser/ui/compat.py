"""Game Chooser - UI backend selection

Goals:
- Deterministic backend selection (Qt when a binding is installed, console otherwise)
- Lazy Qt imports so a missing binding never breaks headless use

Environment override:
- GAME_CHOOSER_GUI_BACKEND=qt|console
"""

from __future__ import annotations

import importlib
import logging
import os
from typing import Any, Literal, Optional, Tuple

logger = logging.getLogger(__name__)

UIBackend = Literal["qt", "console"]
UI_BACKEND_ENV_VAR = "GAME_CHOOSER_GUI_BACKEND"

_QT_BINDINGS = (("pyside6", "PySide6"), ("pyqt5", "PyQt5"))


class GUIBackendError(RuntimeError):
    """Raised when the requested UI backend cannot be used."""


def detect_qt_binding() -> Optional[str]:
    """Return the available Qt binding name (PySide6 preferred, then PyQt5), or None."""
    for binding_name, base in _QT_BINDINGS:
        try:
            importlib.import_module(f"{base}.QtCore")
            return binding_name
        except ImportError:
            continue
    return None


def load_qt() -> Tuple[Any, Any, str]:
    """Load a Qt binding and return (QtWidgets, QtCore, binding_name)."""
    for binding_name, base in _QT_BINDINGS:
        try:
            QtCore = importlib.import_module(f"{base}.QtCore")
            QtWidgets = importlib.import_module(f"{base}.QtWidgets")
            return QtWidgets, QtCore, binding_name
        except ImportError:
            continue
    raise GUIBackendError("No Qt binding found (PySide6/PyQt5)")


def qt_signal_slot(QtCore: Any) -> Tuple[Any, Any]:
    Signal = getattr(QtCore, "Signal", None) or getattr(QtCore, "pyqtSignal")
    Slot = getattr(QtCore, "Slot", None) or getattr(QtCore, "pyqtSlot")
    return Signal, Slot


def select_backend(backend: Optional[str] = None) -> UIBackend:
    """Select exactly one backend.

    Priority:
    1) Explicit `backend` argument
    2) Env var GAME_CHOOSER_GUI_BACKEND
    3) Auto: console (the scan itself never needs a window)
    """
    if backend:
        normalized = backend.strip().lower()
        if normalized in ("qt", "console"):
            if normalized == "qt" and detect_qt_binding() is None:
                raise GUIBackendError("Qt backend requested but no Qt binding is installed")
            return normalized  # type: ignore[return-value]
        raise GUIBackendError(f"Invalid backend: {backend!r} (expected 'qt' or 'console')")

    env_backend = (os.environ.get(UI_BACKEND_ENV_VAR) or "").strip().lower()
    if env_backend:
        return select_backend(env_backend)

    return "console"
