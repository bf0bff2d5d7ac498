"""
MODULE: marches_publics.core.dependency_injection
RESPONSIBILITY: Build the storage, notifications and service once per process.
ALLOWED: Importing services and storage backends.
FORBIDDEN: Business logic, module-level instances.
ERRORS: None.

Контейнер зависимостей

Создаётся точкой входа один раз с готовой конфигурацией и передаётся
дальше явно. Глобального экземпляра нет: хранилище не ищется через
глобальное состояние.
"""

from typing import Optional

from loguru import logger

from marches_publics.config.settings import Config
from marches_publics.core.interfaces import IStorageBackend
from marches_publics.core.storage import JsonFileStorage
from marches_publics.services.contract_service import ContractService
from marches_publics.services.contract_store import ContractStore
from marches_publics.services.merge_engine import ReplaceConfirmation
from marches_publics.utils.notifications import (
    ConsoleProvider,
    NotificationHistory,
    NotificationManager,
)


class DependencyContainer:
    """
    Контейнер зависимостей для управления жизненным циклом сервисов
    """

    def __init__(
        self,
        config: Config,
        backend: Optional[IStorageBackend] = None,
        console_notifications: bool = True,
        confirm_replace: Optional[ReplaceConfirmation] = None,
    ):
        """
        Args:
            config: Загруженная конфигурация
            backend: Носитель (по умолчанию JSON файлы в MP_DATA_DIR)
            console_notifications: Выводить ли уведомления в консоль
            confirm_replace: Запрос подтверждения полной замены
        """
        self.config = config
        self._backend = backend
        self._console_notifications = console_notifications
        self._confirm_replace = confirm_replace
        self._store: Optional[ContractStore] = None
        self._notifications: Optional[NotificationManager] = None
        self._history: Optional[NotificationHistory] = None
        self._contract_service: Optional[ContractService] = None

    def get_storage_backend(self) -> IStorageBackend:
        """Получение носителя"""
        if self._backend is None:
            logger.info(f"Создание JsonFileStorage в {self.config.storage.data_dir}")
            self._backend = JsonFileStorage(self.config.storage.data_dir)
        return self._backend

    def get_contract_store(self) -> ContractStore:
        """Получение хранилища коллекции"""
        if self._store is None:
            logger.info(f"Создание ContractStore (ключ '{self.config.storage.storage_key}')")
            self._store = ContractStore(self.get_storage_backend(), key=self.config.storage.storage_key)
        return self._store

    def get_notification_history(self) -> NotificationHistory:
        """Получение истории уведомлений"""
        if self._history is None:
            self._history = NotificationHistory(ttl=self.config.app.notification_ttl)
        return self._history

    def get_notification_manager(self) -> NotificationManager:
        """Получение менеджера уведомлений"""
        if self._notifications is None:
            providers = [self.get_notification_history()]
            if self._console_notifications:
                providers.append(ConsoleProvider())
            self._notifications = NotificationManager(providers)
        return self._notifications

    def get_contract_service(self) -> ContractService:
        """Получение сервиса каталога"""
        if self._contract_service is None:
            logger.info("Создание ContractService")
            self._contract_service = ContractService(
                store=self.get_contract_store(),
                notifier=self.get_notification_manager(),
                default_author=self.config.app.default_author,
                strict_import=self.config.app.strict_import,
                confirm_replace=self._confirm_replace,
                export_dir=self.config.storage.export_dir,
                download_dir=self.config.storage.download_dir,
            )
        return self._contract_service
