# quack_companion/services/notifications.py
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..schemas.diagnostics import Notification, NotificationLevel

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def show_error(self, message: str) -> None: ...

    def show_warning(self, message: str) -> None: ...

    def show_info(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier that only writes to the log."""

    def show_error(self, message: str) -> None:
        logger.error(message)

    def show_warning(self, message: str) -> None:
        logger.warning(message)

    def show_info(self, message: str) -> None:
        logger.info(message)


class NotificationCenter(LoggingNotifier):
    """Keeps the most recent user-facing messages for the front end to poll."""

    def __init__(self, max_messages: int = 100):
        self._messages: deque[Notification] = deque(maxlen=max_messages)

    def _push(self, level: NotificationLevel, message: str) -> None:
        self._messages.append(Notification(
            level=level,
            message=message,
            timestamp=datetime.now(timezone.utc)
        ))

    def show_error(self, message: str) -> None:
        super().show_error(message)
        self._push(NotificationLevel.ERROR, message)

    def show_warning(self, message: str) -> None:
        super().show_warning(message)
        self._push(NotificationLevel.WARNING, message)

    def show_info(self, message: str) -> None:
        super().show_info(message)
        self._push(NotificationLevel.INFO, message)

    def get_messages(self, clear: bool = False) -> list[Notification]:
        messages = list(self._messages)
        if clear:
            self._messages.clear()
        return messages
