"""Corrupt archive recovery.

When an archive lists a descriptor whose bytes cannot be read, the user is asked whether
the file should be deleted. The whole exchange (question, delete, result message) runs as
one request on the interaction executor, which owns the single thread allowed to talk to
the user. Worker threads block until the user has answered.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Set, Union

from ..exceptions import FileOperationError, InteractionError
from .diagnostics import DiagnosticKind, ScanDiagnostics

logger = logging.getLogger(__name__)

CONFIRM_TITLE = "Corrupt Map File Found"
CONFIRM_MESSAGE = (
    "Could not parse map file correctly, would you like to remove it?\n{path}\n"
    "(You may see this error message again if you keep the file)"
)
RESULT_TITLE = "File Removal Result"
DELETED_MESSAGE = "File was deleted successfully."
DELETE_FAILED_MESSAGE = "Unable to delete file, please remove it by hand:\n{path}"

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


class InteractionChannel(Protocol):
    def confirm(self, message: str, title: str) -> bool: ...
    def notify(self, message: str, title: str, severity: str = SEVERITY_INFO) -> None: ...


@dataclass(frozen=True)
class InteractionRequest:
    """Work to run against the interaction channel on the interaction thread."""

    title: str
    action: Callable[[InteractionChannel], Any]


class InteractionExecutor(Protocol):
    def present_and_await(self, request: InteractionRequest) -> Any: ...
    def close(self) -> None: ...


class SerialInteractionExecutor:
    """Runs interaction requests one at a time on a dedicated thread.

    Calls from that thread itself run inline so nested requests cannot deadlock.
    """

    def __init__(self, channel: InteractionChannel) -> None:
        self.channel = channel
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="interaction")
        self._thread_ident: Optional[int] = None

    def _run(self, request: InteractionRequest) -> Any:
        self._thread_ident = threading.get_ident()
        return request.action(self.channel)

    def present_and_await(self, request: InteractionRequest) -> Any:
        if self._thread_ident == threading.get_ident():
            return request.action(self.channel)
        try:
            future = self._executor.submit(self._run, request)
        except RuntimeError as exc:
            raise InteractionError(f"Interaction executor is closed: {exc}", request.title) from exc
        return future.result()

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class RecoveryOutcome(str, Enum):
    DELETED = "deleted"
    KEPT = "kept"
    DELETE_FAILED = "delete_failed"
    ALREADY_HANDLED = "already_handled"
    DISABLED = "disabled"
    FAILED = "failed"


def delete_archive(path: Path) -> None:
    """Delete `path`; raise FileOperationError if it is still there afterwards."""
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        if path.exists():
            raise FileOperationError(f"Could not delete file: {exc}", file_path=str(path),
                                     operation="delete") from exc


class CorruptionRecoveryGate:
    """Asks the user about corrupt archives, at most once per archive per scan session."""

    def __init__(
        self,
        executor: Optional[InteractionExecutor],
        diagnostics: Optional[ScanDiagnostics] = None,
        enabled: bool = True,
        deleter: Callable[[Path], None] = delete_archive,
    ) -> None:
        self.executor = executor
        self.diagnostics = diagnostics or ScanDiagnostics()
        self.enabled = enabled and executor is not None
        self._deleter = deleter
        self._handled: Set[Path] = set()
        self._lock = threading.Lock()

    def start_session(self) -> None:
        with self._lock:
            self._handled.clear()

    def _claim(self, path: Path) -> bool:
        with self._lock:
            if path in self._handled:
                return False
            self._handled.add(path)
            return True

    def handle(
        self,
        archive_path: Union[str, Path],
        diagnostics: Optional[ScanDiagnostics] = None,
    ) -> RecoveryOutcome:
        """Ask about one corrupt archive; problems go to `diagnostics` (the gate's own by default)."""
        path = Path(archive_path).absolute()
        sink = diagnostics or self.diagnostics
        if not self._claim(path):
            logger.debug("Corrupt archive %s already handled this session", path)
            return RecoveryOutcome.ALREADY_HANDLED
        if not self.enabled or self.executor is None:
            logger.info("Corrupt archive kept (prompt disabled): %s", path)
            return RecoveryOutcome.DISABLED

        request = InteractionRequest(
            title=CONFIRM_TITLE,
            action=lambda channel: self._confirm_and_delete(channel, path, sink),
        )
        try:
            return self.executor.present_and_await(request)
        except Exception as exc:
            sink.report(
                DiagnosticKind.RECOVERY_FAILED,
                path,
                f"Could not ask about corrupt archive: {exc}",
                exc_info=True,
            )
            return RecoveryOutcome.FAILED

    def _confirm_and_delete(
        self,
        channel: InteractionChannel,
        path: Path,
        diagnostics: ScanDiagnostics,
    ) -> RecoveryOutcome:
        if not channel.confirm(CONFIRM_MESSAGE.format(path=path), CONFIRM_TITLE):
            logger.info("User kept corrupt archive %s", path)
            return RecoveryOutcome.KEPT

        try:
            self._deleter(path)
        except FileOperationError as exc:
            diagnostics.report(DiagnosticKind.RECOVERY_FAILED, path, str(exc))
            channel.notify(DELETE_FAILED_MESSAGE.format(path=path), RESULT_TITLE, SEVERITY_WARNING)
            return RecoveryOutcome.DELETE_FAILED

        logger.info("Deleted corrupt archive %s", path)
        channel.notify(DELETED_MESSAGE, RESULT_TITLE, SEVERITY_INFO)
        return RecoveryOutcome.DELETED
