# sage_insights/services/notifications.py
import logging
from typing import List

from sage_insights.api.v1.schemas import Notification

logger = logging.getLogger("notifications")


class Notifier:
    """Queue of transient, non-blocking messages for one dashboard view.

    Nothing here blocks the page; the renderer drains the queue and shows each
    message once.
    """

    def __init__(self):
        self._pending: List[Notification] = []

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def _push(self, level: str, message: str) -> Notification:
        note = Notification(level=level, message=message)
        self._pending.append(note)
        logger.info("Notification raised (%s): %s", level, message)
        return note

    def drain(self) -> List[Notification]:
        out, self._pending = self._pending, []
        return out
