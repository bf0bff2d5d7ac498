"""
MODULE: marches_publics.config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, storage access (only config).
ERRORS: ConfigError (required variables).
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import os
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

from marches_publics.errors import ConfigError


@dataclass(frozen=True)
class StorageConfig:
    """Конфигурация локального хранилища"""
    data_dir: Path
    storage_key: str
    export_dir: Path
    download_dir: Path


@dataclass(frozen=True)
class LoggingConfig:
    """Конфигурация логирования"""
    level: str = "INFO"
    log_dir: Path = Path("logs")
    rotation: str = "10 MB"
    retention: str = "30 days"
    file_logging: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Основная конфигурация приложения"""
    app_name: str
    app_version: str
    default_author: str
    strict_import: bool
    seed_examples: bool
    notification_ttl: float


class Config:
    """
    Главный класс конфигурации, загружающий все настройки из .env файла
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Инициализация конфигурации

        Args:
            env_file: Путь к .env файлу (опционально)
        """
        self._load_environment(env_file)
        self.storage = self._load_storage_config()
        self.logging = self._load_logging_config()
        self.app = self._load_app_config()

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Загрузка переменных окружения"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except OSError as e:
            logger.warning(f"Не удалось загрузить .env файл: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> Any:
        """
        Получение переменной окружения с валидацией

        Args:
            key: Ключ переменной
            default: Значение по умолчанию
            required: Обязательная ли переменная

        Returns:
            Значение переменной

        Raises:
            ConfigError: Если обязательная переменная не найдена
        """
        value = os.getenv(key)

        if value is None or value == "":
            if required:
                raise ConfigError(f"Обязательная переменная окружения {key} не найдена")
            return default

        return value

    def _get_env_float(self, key: str, default: float = 0.0) -> float:
        """Получение float переменной из окружения"""
        try:
            return float(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат float для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Получение int переменной из окружения"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат int для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _get_env_bool(self, key: str, default: bool = False) -> bool:
        """Получение bool переменной из окружения"""
        value = self._get_env_var(key, default)
        if isinstance(value, bool):
            return value
        return value.strip().lower() in ('true', '1', 'yes', 'y', 'oui')

    def _get_env_path(self, key: str, default: Path) -> Path:
        """Получение пути из окружения (с раскрытием ~)"""
        return Path(self._get_env_var(key, default)).expanduser()

    def _load_storage_config(self) -> StorageConfig:
        """Загрузка конфигурации хранилища"""
        return StorageConfig(
            data_dir=self._get_env_path("MP_DATA_DIR", Path.home() / ".local" / "share" / "marches_publics"),
            storage_key=self._get_env_var("MP_STORAGE_KEY", "marches-publics"),
            export_dir=self._get_env_path("MP_EXPORT_DIR", Path.cwd()),
            download_dir=self._get_env_path("MP_DOWNLOAD_DIR", Path.home() / "Downloads"),
        )

    def _load_logging_config(self) -> LoggingConfig:
        """Загрузка конфигурации логирования"""
        return LoggingConfig(
            level=self._get_env_var("MP_LOG_LEVEL", "INFO"),
            log_dir=self._get_env_path("MP_LOG_DIR", Path("logs")),
            rotation=self._get_env_var("MP_LOG_ROTATION", "10 MB"),
            retention=self._get_env_var("MP_LOG_RETENTION", "30 days"),
            file_logging=self._get_env_bool("MP_LOG_TO_FILE", True),
        )

    def _load_app_config(self) -> AppConfig:
        """Загрузка основной конфигурации приложения"""
        return AppConfig(
            app_name=self._get_env_var("MP_APP_NAME", "Marchés Publics"),
            app_version=self._get_env_var("MP_APP_VERSION", "1.0.0"),
            default_author=self._get_env_var("MP_DEFAULT_AUTHOR", "Utilisateur"),
            strict_import=self._get_env_bool("MP_STRICT_IMPORT", False),
            seed_examples=self._get_env_bool("MP_SEED_EXAMPLES", True),
            notification_ttl=self._get_env_float("MP_NOTIFICATION_TTL", 3.0),
        )

    def validate(self) -> bool:
        """
        Валидация конфигурации

        Returns:
            True если конфигурация валидна
        """
        try:
            if not self.storage.storage_key.strip():
                raise ConfigError("Ключ хранилища MP_STORAGE_KEY пуст")

            if self.app.notification_ttl <= 0:
                raise ConfigError("MP_NOTIFICATION_TTL должен быть положительным")

            logger.info("Конфигурация прошла валидацию")
            return True

        except ConfigError as e:
            logger.error(f"Ошибка валидации конфигурации: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование конфигурации в словарь"""
        return {
            "storage": {
                "data_dir": str(self.storage.data_dir),
                "storage_key": self.storage.storage_key,
                "export_dir": str(self.storage.export_dir),
                "download_dir": str(self.storage.download_dir),
            },
            "logging": {
                "level": self.logging.level,
                "log_dir": str(self.logging.log_dir),
                "file_logging": self.logging.file_logging,
            },
            "app": {
                "app_name": self.app.app_name,
                "app_version": self.app.app_version,
                "default_author": self.app.default_author,
                "strict_import": self.app.strict_import,
                "seed_examples": self.app.seed_examples,
                "notification_ttl": self.app.notification_ttl,
            },
        }
