"""User-facing notices.

Notices are fire-and-forget: a notifier that fails must never abort the
operation that tried to show the notice.
"""

from enum import Enum
from typing import Protocol

from .logging import error, info, warning


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity) -> None: ...


class LogNotifier:
    """Shows notices through the image_resize logger."""

    def notify(self, message: str, severity: Severity) -> None:
        if severity is Severity.ERROR:
            error(message)
        elif severity is Severity.WARNING:
            warning(message)
        else:
            info(message)


class RecordingNotifier:
    """Keeps notices in memory, for embedding hosts and tests."""

    def __init__(self):
        self.notices: list[tuple[str, Severity]] = []

    def notify(self, message: str, severity: Severity) -> None:
        self.notices.append((message, severity))

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.notices]


def send_notice(
    notifier: Notifier | None,
    message: str,
    severity: Severity = Severity.INFO,
    enabled: bool = True,
) -> None:
    """Show a notice, logging and swallowing any notifier failure."""
    if notifier is None or not enabled:
        return
    try:
        notifier.notify(message, severity)
    except Exception as e:
        warning(f'Failed to show notice "{message}": {e}')
