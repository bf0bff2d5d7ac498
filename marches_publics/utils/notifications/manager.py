"""
Менеджер уведомлений - центральная точка для отправки уведомлений.
"""

from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from .base import NotificationLevel, NotificationProvider


class NotificationManager:
    """
    Менеджер уведомлений.
    Управляет всеми провайдерами и отправляет уведомления через них.
    """

    def __init__(self, providers: Optional[Iterable[NotificationProvider]] = None):
        self.providers: List[NotificationProvider] = list(providers or [])

    def add_provider(self, provider: NotificationProvider) -> None:
        self.providers.append(provider)

    def send(self, level: NotificationLevel, message: str,
             details: Optional[Dict[str, Any]] = None) -> bool:
        """
        Отправляет уведомление через все активные провайдеры.

        :param level: Уровень важности
        :param message: Сообщение
        :param details: Дополнительные детали
        :return: True если хотя бы один провайдер отправил успешно
        """
        if not self.providers:
            return False

        success = False
        for provider in self.providers:
            if provider.is_enabled():
                try:
                    if provider.send(level, message, details):
                        success = True
                except Exception as e:
                    logger.error(f"Ошибка отправки уведомления через {provider.__class__.__name__}: {e}")

        return success

    def success(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Уведомление об успешной операции."""
        return self.send(NotificationLevel.SUCCESS, message, details)

    def info(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Информационное уведомление."""
        return self.send(NotificationLevel.INFO, message, details)

    def warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Предупреждение."""
        return self.send(NotificationLevel.WARNING, message, details)

    def error(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Уведомление об ошибке."""
        return self.send(NotificationLevel.ERROR, message, details)
