"""Dismissable user notifications.

A NotificationCenter collects messages produced by services (auth failures,
connection warnings, confirmations) so that the caller (web response, CLI)
can display them. A notification may carry one action, typically "Retry",
which only runs when explicitly triggered.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

ERROR_DURATION_MS = 8000
WARNING_DURATION_MS = 6000
DEFAULT_DURATION_MS = 5000

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 9


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class NotificationAction:
    """Button attached to a notification."""

    label: str
    callback: Callable[[], Any]


@dataclass
class Notification:
    id: str
    type: NotificationType
    title: str
    message: str | None = None
    duration: int = DEFAULT_DURATION_MS
    action: NotificationAction | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "duration": self.duration,
            "action": self.action.label if self.action else None,
        }


def _new_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


class NotificationCenter:
    """In-memory list of pending notifications."""

    def __init__(self) -> None:
        self._items: list[Notification] = []

    def add(
        self,
        type: NotificationType,
        title: str,
        message: str | None = None,
        duration: int = DEFAULT_DURATION_MS,
        action: NotificationAction | None = None,
    ) -> Notification:
        notification = Notification(
            id=_new_id(),
            type=type,
            title=title,
            message=message,
            duration=duration,
            action=action,
        )
        self._items.append(notification)
        logger.debug(
            "notification.added",
            type=type.value,
            title=title,
            has_action=action is not None,
        )
        return notification

    def remove(self, notification_id: str) -> None:
        self._items = [n for n in self._items if n.id != notification_id]

    def show_success(self, title: str, message: str | None = None) -> Notification:
        return self.add(NotificationType.SUCCESS, title, message)

    def show_error(
        self,
        title: str,
        message: str | None = None,
        action: NotificationAction | None = None,
    ) -> Notification:
        return self.add(NotificationType.ERROR, title, message, ERROR_DURATION_MS, action)

    def show_warning(
        self,
        title: str,
        message: str | None = None,
        action: NotificationAction | None = None,
    ) -> Notification:
        return self.add(NotificationType.WARNING, title, message, WARNING_DURATION_MS, action)

    def show_info(self, title: str, message: str | None = None) -> Notification:
        return self.add(NotificationType.INFO, title, message)

    def clear_all(self) -> None:
        self._items = []

    def pending(self) -> list[Notification]:
        return list(self._items)

    def get(self, notification_id: str) -> Notification | None:
        for notification in self._items:
            if notification.id == notification_id:
                return notification
        return None

    def trigger_action(self, notification_id: str) -> Any:
        """Run a notification's action and dismiss it.

        Returns:
            Whatever the action callback returns

        Raises:
            KeyError: If no pending notification with an action has this id
        """
        notification = self.get(notification_id)
        if notification is None or notification.action is None:
            raise KeyError(notification_id)

        self.remove(notification_id)
        logger.info("notification.action_triggered", label=notification.action.label)
        return notification.action.callback()
