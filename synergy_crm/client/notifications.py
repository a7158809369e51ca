import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    id: int
    kind: str  # loading | success | error
    message: str


class Notifier:
    """
    Toast-style notifications.

    A loading notification returns an id; passing that id to success() or
    error() replaces it in place, so one operation shows one toast.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.active: Dict[int, Notification] = {}
        self.history: List[Notification] = []

    def _show(self, kind: str, message: str, notification_id: Optional[int] = None) -> int:
        if notification_id is None:
            notification_id = next(self._ids)
        notification = Notification(notification_id, kind, message)
        self.active[notification_id] = notification
        self.history.append(notification)
        log = logger.error if kind == "error" else logger.info
        log(f"[{kind}] {message}")
        return notification_id

    def loading(self, message: str) -> int:
        return self._show("loading", message)

    def success(self, message: str, notification_id: Optional[int] = None) -> int:
        return self._show("success", message, notification_id)

    def error(self, message: str, notification_id: Optional[int] = None) -> int:
        return self._show("error", message, notification_id)

    def dismiss(self, notification_id: int):
        self.active.pop(notification_id, None)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
