"""
Провайдер, хранящий историю уведомлений в памяти.

Уведомление считается видимым ttl секунд после отправки
(кратковременное сообщение), затем остаётся только в истории.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from .base import Notification, NotificationLevel, NotificationProvider


class NotificationHistory(NotificationProvider):
    """История уведомлений с признаком видимости."""

    def __init__(self, ttl: float = 3.0, max_items: int = 100, enabled: bool = True,
                 clock: Callable[[], datetime] = datetime.now):
        """
        :param ttl: Время видимости уведомления в секундах
        :param max_items: Сколько последних уведомлений хранить
        :param clock: Источник текущего времени
        """
        super().__init__(enabled)
        self.ttl = timedelta(seconds=ttl)
        self.max_items = max_items
        self._clock = clock
        self.items: List[Notification] = []

    def send(self, level: NotificationLevel, message: str,
             details: Optional[Dict[str, Any]] = None) -> bool:
        if not self.enabled:
            return False
        self.items.append(Notification(level=level, message=message,
                                       created_at=self._clock(), details=dict(details or {})))
        del self.items[:-self.max_items]
        return True

    def active(self) -> List[Notification]:
        """Уведомления, которые ещё должны отображаться."""
        now = self._clock()
        return [item for item in self.items if now - item.created_at < self.ttl]

    @property
    def last(self) -> Optional[Notification]:
        return self.items[-1] if self.items else None

    def messages(self, level: Optional[NotificationLevel] = None) -> List[str]:
        return [item.message for item in self.items if level is None or item.level is level]

    def clear(self) -> None:
        self.items.clear()
