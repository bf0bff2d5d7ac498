"""
Провайдер уведомлений для консоли (rich, stderr).
"""

from typing import Any, Dict, Optional

from rich.console import Console

from .base import NotificationLevel, NotificationProvider

_LEVEL_STYLES = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.INFO: "blue",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.ERROR: "bold red",
}


class ConsoleProvider(NotificationProvider):
    """Вывод уведомлений в консоль."""

    def __init__(self, console: Optional[Console] = None, enabled: bool = True):
        super().__init__(enabled)
        self.console = console or Console(stderr=True)

    def send(self, level: NotificationLevel, message: str,
             details: Optional[Dict[str, Any]] = None) -> bool:
        if not self.enabled:
            return False
        self.console.print(
            self.format_message(level, message, details),
            style=_LEVEL_STYLES.get(level),
            markup=False,
            highlight=False,
        )
        return True
