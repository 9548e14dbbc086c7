from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    id: int
    kind: NotificationKind
    message: str
    created_at: float


class NotificationQueue:
    """Transient toasts. Each entry disappears after `ttl_seconds` or on dismiss()."""

    def __init__(self, ttl_seconds: float = 4.0, now: Callable[[], float] | None = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._now = now or time.monotonic
        self._ids = itertools.count(1)
        self._entries: dict[int, Notification] = {}
        self._timers: dict[int, asyncio.TimerHandle] = {}

    @property
    def items(self) -> list[Notification]:
        return list(self._entries.values())

    def push(self, kind: NotificationKind | str, message: str) -> Notification:
        notification = Notification(
            id=next(self._ids),
            kind=NotificationKind(kind),
            message=message,
            created_at=self._now(),
        )
        self._entries[notification.id] = notification
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and self.ttl_seconds > 0:
            self._timers[notification.id] = loop.call_later(self.ttl_seconds, self.dismiss, notification.id)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationKind.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.push(NotificationKind.INFO, message)

    def dismiss(self, notification_id: int) -> bool:
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        return self._entries.pop(notification_id, None) is not None

    def expire(self) -> list[int]:
        """Drops entries older than the ttl; used when no event loop drives the timers."""
        cutoff = self._now() - self.ttl_seconds
        expired = [item.id for item in self._entries.values() if item.created_at <= cutoff]
        for notification_id in expired:
            self.dismiss(notification_id)
        return expired

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._entries.clear()
