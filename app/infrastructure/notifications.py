import logging
from enum import Enum
from typing import List

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str


class Notifier:
    """Collects user-facing notifications raised while handling one action.

    Each notification is logged as it is sent; callers read ``sent`` to
    return them alongside the response.
    """

    def __init__(self):
        self.sent: List[Notification] = []

    def send(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.sent.append(notification)
        if level == NotificationLevel.ERROR:
            logger.warning(f"Sending {level.value} notification: {message}")
        else:
            logger.info(f"Sending {level.value} notification: {message}")
        return notification

    def success(self, message: str) -> Notification:
        return self.send(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.send(NotificationLevel.ERROR, message)

    def clear(self) -> None:
        self.sent.clear()
