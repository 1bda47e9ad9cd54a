from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

NotificationKind = Literal["info", "success", "error"]

INFO_DURATION_MS = 3000
ERROR_DURATION_MS = 5000


@dataclass(frozen=True, slots=True)
class Notification:
    kind: NotificationKind
    text: str
    duration_ms: int


def default_duration(kind: NotificationKind) -> int:
    return ERROR_DURATION_MS if kind == "error" else INFO_DURATION_MS


class Notifier(Protocol):
    def notify(self, kind: NotificationKind, text: str) -> Notification: ...

    def clear(self) -> None: ...


class RecordingNotifier:
    """Keeps every notification in memory; used outside the Qt surface."""

    def __init__(self) -> None:
        self.messages: list[Notification] = []
        self.cleared = 0

    def notify(self, kind: NotificationKind, text: str) -> Notification:
        notification = Notification(kind=kind, text=text, duration_ms=default_duration(kind))
        self.messages.append(notification)
        return notification

    def clear(self) -> None:
        self.cleared += 1

    def texts(self, kind: NotificationKind | None = None) -> list[str]:
        return [item.text for item in self.messages if kind is None or item.kind == kind]
