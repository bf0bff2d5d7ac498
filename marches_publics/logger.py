"""
MODULE: marches_publics.logger
RESPONSIBILITY: Centralized Loguru configuration and logger instance provision.
ALLOWED: Configuring loguru, exporting `logger` object.
FORBIDDEN: Business logic, re-configuring logger in other modules.
ERRORS: OSError (if log directory creation fails).

Централизованная настройка логирования через Loguru.
ЗАПРЕЩЕНО настраивать logger в других модулях!
Остальные модули просто делают `from loguru import logger`,
точка входа один раз вызывает configure_logging().
"""

import sys
from pathlib import Path
from typing import List

from loguru import logger

from marches_publics.config.settings import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# id обработчиков, добавленных configure_logging (для повторной настройки)
_handler_ids: List[int] = []


def configure_logging(settings: LoggingConfig) -> None:
    """
    Настраивает обработчики loguru по конфигурации.

    Повторный вызов заменяет ранее добавленные обработчики.
    """
    # Удаляем стандартный handler и наши прежние handlers
    logger.remove()
    _handler_ids.clear()

    # Консольный вывод
    _handler_ids.append(logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=settings.level.upper(),
        colorize=True,
    ))

    if not settings.file_logging:
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Файл приложения (DEBUG и выше)
    _handler_ids.append(logger.add(
        log_dir / "app.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation=settings.rotation,
        retention=settings.retention,
        compression="zip",
        encoding="utf-8",
    ))

    # Файл ошибок (ERROR и выше)
    _handler_ids.append(logger.add(
        log_dir / "errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation=settings.rotation,
        retention="90 days",
        compression="zip",
        encoding="utf-8",
        backtrace=True,
        diagnose=False,
    ))


__all__ = ["logger", "configure_logging"]
