"""
Transient notifications and navigation requests raised by the profile page
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier:
    """Collects toasts in the order they were raised"""

    def __init__(self):
        self.notifications: List[Notification] = []

    def success(self, message: str) -> None:
        logger.info(message)
        self.notifications.append(Notification("success", message))

    def error(self, message: str) -> None:
        logger.warning(message)
        self.notifications.append(Notification("error", message))

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None


class Navigator:
    """Records the paths the page asked to navigate to"""

    def __init__(self):
        self.history: List[str] = []

    def push(self, path: str) -> None:
        logger.info("Navigating to %s", path)
        self.history.append(path)

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None
