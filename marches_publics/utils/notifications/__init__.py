"""
Кратковременные уведомления пользователя.
"""

from .base import Notification, NotificationLevel, NotificationProvider
from .console import ConsoleProvider
from .history import NotificationHistory
from .manager import NotificationManager

__all__ = [
    "Notification",
    "NotificationLevel",
    "NotificationProvider",
    "ConsoleProvider",
    "NotificationHistory",
    "NotificationManager",
]
