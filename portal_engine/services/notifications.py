"""
User-facing notifications.

Mutations report success / failure through a Notifier instead of raising,
mirroring the transient toast the portal shows.
"""

from typing import List, Protocol

from ..core.logging import get_logger
from ..models.request import Notification

logger = get_logger(__name__)


class Notifier(Protocol):

    def success(self, title: str, description: str) -> Notification:
        ...

    def error(self, title: str, description: str) -> Notification:
        ...


class LoggingNotifier:
    """Writes notifications to the log only."""

    def success(self, title: str, description: str) -> Notification:
        logger.info("%s: %s", title, description)
        return Notification(level="success", title=title, description=description)

    def error(self, title: str, description: str) -> Notification:
        logger.warning("%s: %s", title, description)
        return Notification(level="error", title=title, description=description)


class CollectingNotifier(LoggingNotifier):
    """Logs and keeps every notification, in order."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def success(self, title: str, description: str) -> Notification:
        note = super().success(title, description)
        self.notifications.append(note)
        return note

    def error(self, title: str, description: str) -> Notification:
        note = super().error(title, description)
        self.notifications.append(note)
        return note

    @property
    def errors(self) -> List[Notification]:
        return [n for n in self.notifications if n.level == "error"]
