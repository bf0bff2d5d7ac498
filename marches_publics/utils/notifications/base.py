"""
Базовые классы для системы уведомлений.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class NotificationLevel(Enum):
    """Уровни важности уведомлений."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Одно кратковременное уведомление."""
    level: NotificationLevel
    message: str
    created_at: datetime
    details: Dict[str, Any] = field(default_factory=dict)


class NotificationProvider(ABC):
    """
    Базовый класс для провайдеров уведомлений.
    Все провайдеры должны наследоваться от этого класса.
    """

    def __init__(self, enabled: bool = True):
        """
        Инициализация провайдера.

        :param enabled: Включен ли провайдер
        """
        self.enabled = enabled

    @abstractmethod
    def send(self, level: NotificationLevel, message: str,
             details: Optional[Dict[str, Any]] = None) -> bool:
        """
        Отправляет уведомление.

        :param level: Уровень важности
        :param message: Текст сообщения
        :param details: Дополнительные детали (словарь)
        :return: True если отправлено успешно, False в противном случае
        """
        pass

    def is_enabled(self) -> bool:
        """Проверяет, включен ли провайдер."""
        return self.enabled

    def format_message(self, level: NotificationLevel, message: str,
                       details: Optional[Dict[str, Any]] = None) -> str:
        """
        Форматирует сообщение для вывода.

        :param level: Уровень важности
        :param message: Сообщение
        :param details: Дополнительные детали
        :return: Отформатированное сообщение
        """
        level_emoji = {
            NotificationLevel.SUCCESS: "✅",
            NotificationLevel.INFO: "ℹ️",
            NotificationLevel.WARNING: "⚠️",
            NotificationLevel.ERROR: "❌",
        }

        emoji = level_emoji.get(level, "ℹ️")
        formatted = f"{emoji} {message}"

        if details:
            formatted += "".join(f"\n  • {key}: {value}" for key, value in details.items())

        return formatted
