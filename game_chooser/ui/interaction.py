"""Non-GUI confirmation channels."""

from __future__ import annotations

import logging
import sys
from typing import IO, List, Optional, Tuple

logger = logging.getLogger(__name__)

_YES = ("y", "yes")


class ConsoleInteractionChannel:
    """Asks on a text stream; anything but y/yes counts as no."""

    def __init__(self, stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None) -> None:
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self) -> IO[str]:
        return self._stdin or sys.stdin

    @property
    def stdout(self) -> IO[str]:
        return self._stdout or sys.stdout

    def confirm(self, message: str, title: str) -> bool:
        self.stdout.write(f"\n== {title} ==\n{message}\n[y/N]: ")
        self.stdout.flush()
        answer = self.stdin.readline()
        return answer.strip().lower() in _YES

    def notify(self, message: str, title: str, severity: str = "info") -> None:
        self.stdout.write(f"\n== {title} ({severity}) ==\n{message}\n")
        self.stdout.flush()


class AutoAnswerChannel:
    """Answers every confirmation with a fixed value and records what was shown."""

    def __init__(self, answer: bool = False) -> None:
        self.answer = answer
        self.confirmations: List[Tuple[str, str]] = []
        self.notifications: List[Tuple[str, str, str]] = []

    def confirm(self, message: str, title: str) -> bool:
        self.confirmations.append((message, title))
        logger.info("%s: answering %s", title, "yes" if self.answer else "no")
        return self.answer

    def notify(self, message: str, title: str, severity: str = "info") -> None:
        self.notifications.append((message, title, severity))
        logger.info("%s: %s", title, message)
