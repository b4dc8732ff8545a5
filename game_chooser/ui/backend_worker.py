"""Background scan worker handle shared by the console and Qt front ends."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class BackendWorkerHandle:
    thread: Any
    cancel_token: Any
    result: Any = field(default=None, init=False)
    error: Optional[BaseException] = field(default=None, init=False)

    def start(self) -> bool:
        try:
            self.thread.start()
            return True
        except RuntimeError as exc:
            logger.exception("Scan worker start failed: %s", exc)
            return False

    def cancel(self) -> bool:
        if self.cancel_token is None:
            return False
        self.cancel_token.cancel()
        return True

    def is_running(self) -> bool:
        if hasattr(self.thread, "isRunning"):
            return bool(self.thread.isRunning())
        if hasattr(self.thread, "is_alive"):
            return bool(self.thread.is_alive())
        return False

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker; True when it has finished."""
        if hasattr(self.thread, "join"):
            self.thread.join(timeout)
        return not self.is_running()


def spawn_backend_worker(
    target: Callable[[Any], Any],
    cancel_token: Any,
    on_finished: Optional[Callable[[Any], None]] = None,
    on_failed: Optional[Callable[[BaseException], None]] = None,
    name: str = "catalog-scan",
) -> BackendWorkerHandle:
    """Build (but do not start) a handle running ``target(cancel_token)`` on a daemon thread."""
    handle = BackendWorkerHandle(thread=None, cancel_token=cancel_token)

    def _run() -> None:
        try:
            handle.result = target(cancel_token)
        except Exception as exc:
            handle.error = exc
            logger.exception("Scan worker failed: %s", exc)
            if on_failed is not None:
                on_failed(exc)
            return
        if on_finished is not None:
            on_finished(handle.result)

    handle.thread = threading.Thread(target=_run, name=name, daemon=True)
    return handle
