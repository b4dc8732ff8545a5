"""Qt interaction channel and executor (lazy Qt binding).

Message boxes may only be shown from the GUI thread. Scan workers hand their request to a
QObject living in that thread through a queued signal and block until it has run.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Dict, Tuple

from ..exceptions import InteractionError
from .compat import qt_signal_slot
from .dialogs import ask_question, show_message

logger = logging.getLogger(__name__)


def build_qt_interaction(QtCore: Any, QtWidgets: Any, parent: Any = None,
                         default_no: bool = True) -> Tuple[Any, Any]:
    """Return (channel, executor) bound to the running QApplication.

    Must be called from the GUI thread.
    """
    Signal, Slot = qt_signal_slot(QtCore)

    class QtInteractionChannel:
        def confirm(self, message: str, title: str) -> bool:
            return ask_question(QtWidgets, parent, title, message, default_no=default_no)

        def notify(self, message: str, title: str, severity: str = "info") -> None:
            show_message(QtWidgets, parent, title, message, severity)

    class _Dispatcher(QtCore.QObject):
        requested = Signal(object)

        def __init__(self) -> None:
            super().__init__()
            self.requested.connect(self._on_requested, QtCore.Qt.ConnectionType.QueuedConnection)

        @Slot(object)
        def _on_requested(self, job) -> None:
            request, future, executor = job
            if not executor._claim(future):
                return
            try:
                future.set_result(request.action(executor.channel))
            except Exception as exc:
                future.set_exception(exc)

    class QtInteractionExecutor:
        def __init__(self, channel) -> None:
            self.channel = channel
            self._dispatcher = _Dispatcher()
            self._closed = threading.Event()
            self._lock = threading.Lock()
            self._pending: Dict[Future, str] = {}

        @property
        def pending_count(self) -> int:
            with self._lock:
                return len(self._pending)

        def _on_gui_thread(self) -> bool:
            return QtCore.QThread.currentThread() == self._dispatcher.thread()

        def _claim(self, future: Future) -> bool:
            # Only one of the GUI slot and close() may settle a pending future.
            with self._lock:
                if self._pending.pop(future, None) is None:
                    return False
            return future.set_running_or_notify_cancel()

        def present_and_await(self, request):
            if self._closed.is_set():
                raise InteractionError("Interaction executor is closed", request.title)
            if self._on_gui_thread():
                return request.action(self.channel)
            future: Future = Future()
            with self._lock:
                if self._closed.is_set():
                    raise InteractionError("Interaction executor is closed", request.title)
                self._pending[future] = request.title
            self._dispatcher.requested.emit((request, future, self))
            return future.result()

        def close(self) -> None:
            """Stop accepting requests and fail every worker still waiting for an answer."""
            with self._lock:
                self._closed.set()
                pending = list(self._pending.items())
                self._pending.clear()
            for future, title in pending:
                if future.set_running_or_notify_cancel():
                    future.set_exception(
                        InteractionError("Interaction executor closed before the request ran", title)
                    )
            if pending:
                logger.info("Interaction executor closed with %d request(s) unanswered", len(pending))

    channel = QtInteractionChannel()
    return channel, QtInteractionExecutor(channel)
