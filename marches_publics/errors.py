"""
MODULE: marches_publics.errors
RESPONSIBILITY: Define the project-wide error taxonomy and exception hierarchy.
ALLOWED: Defining exception classes inheriting from AppError.
FORBIDDEN: Business logic, external imports (except standard library).
ERRORS: None (defines errors).

Таксономия ошибок проекта MarchesPublics.
Все исключения должны наследоваться от AppError.
"""

from typing import Dict, Optional


class AppError(Exception):
    """Базовый класс для всех ошибок приложения"""
    pass


class ConfigError(AppError):
    """Ошибки конфигурации (отсутствующие или неверные настройки)"""
    pass


class ParseError(AppError):
    """Файл импорта не является JSON или не содержит массив"""
    pass


class ValidationError(AppError):
    """
    Нарушение инвариантов записи (даты, сумма, длительность).

    Attributes:
        errors: Словарь поле -> сообщение для пользователя
    """

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class StorageUnavailableError(AppError):
    """Хранилище недоступно или переполнено"""

    def __init__(self, message: str, key: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message)
        self.key = key
        self.original_error = original_error


class CodecError(AppError):
    """Повреждённое содержимое документа (base64, заголовок data:)"""
    pass


class RecordNotFoundError(AppError):
    """Запись, документ или заметка с указанным id не найдены"""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
