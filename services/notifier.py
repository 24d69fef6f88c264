"""In-memory toast queue shared by the dashboard controller and the report form."""

from __future__ import annotations

import logging
from typing import List

from models.notification import Notification

LOGGER = logging.getLogger(__name__)


class Notifier:
    """Collect user-visible notifications until they are dismissed."""

    def __init__(self) -> None:
        self._items: List[Notification] = []

    def toast(self, title: str, description: str, variant: str = "default") -> Notification:
        """Queue a notification and log it at a level matching its variant."""
        notification = Notification(title=title, description=description, variant=variant)
        self._items.append(notification)
        if notification.is_error:
            LOGGER.warning("%s: %s", title, description)
        else:
            LOGGER.info("%s: %s", title, description)
        return notification

    def error(self, title: str, description: str) -> Notification:
        return self.toast(title, description, variant="destructive")

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification; returns False if it was already gone."""
        for idx, item in enumerate(self._items):
            if item.id == notification_id:
                del self._items[idx]
                return True
        return False

    def clear(self) -> None:
        self._items.clear()

    @property
    def items(self) -> List[Notification]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
