"""
MODULE: marches_publics.core.interfaces
RESPONSIBILITY: Define Protocols for dependency injection.
ALLOWED: Typing imports, Protocol.
FORBIDDEN: Implementation details, concrete classes.
ERRORS: None.

Интерфейсы (Protocol) для модульного проектирования

Определяет контракты для взаимодействия между модулями,
обеспечивая слабую связанность и возможность тестирования.
"""

from typing import Any, Dict, Hashable, Optional, Protocol


class IStorageBackend(Protocol):
    """Интерфейс для носителя ключ -> сериализованное значение"""

    def read(self, key: str) -> Optional[str]:
        """Чтение значения по ключу (None, если ключа нет)"""
        ...

    def write(self, key: str, value: str) -> None:
        """Полная перезапись значения по ключу"""
        ...

    def revision(self, key: str) -> Optional[Hashable]:
        """Отпечаток текущего значения (для обнаружения чужой записи)"""
        ...


class INotifier(Protocol):
    """Интерфейс для кратковременных уведомлений пользователя"""

    def success(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Уведомление об успешной операции"""
        ...

    def info(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Информационное уведомление"""
        ...

    def warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Предупреждение"""
        ...

    def error(self, message: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """Уведомление об ошибке"""
        ...
