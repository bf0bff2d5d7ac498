"""
MODULE: marches_publics.core.storage
RESPONSIBILITY: Durable key -> serialized value binding on the local device.
ALLOWED: os, pathlib, tempfile, loguru.
FORBIDDEN: Knowledge of record structure, JSON parsing.
ERRORS: StorageUnavailableError (medium unavailable, full, permission denied).

Носители для хранилища ключ -> строка.

JsonFileStorage хранит каждое значение в отдельном файле <data_dir>/<key>.json,
запись атомарная (временный файл + fsync + os.replace), поэтому после
успешного write следующий read в том же процессе видит новое значение,
а при сбое старое значение остаётся целым.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Hashable, Optional, Tuple

from loguru import logger

from marches_publics.errors import StorageUnavailableError

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def key_to_filename(key: str) -> str:
    """Имя файла для ключа (небезопасные символы заменяются на '_')"""
    if not key or not key.strip():
        raise ValueError("Ключ хранилища не может быть пустым")
    return _UNSAFE_KEY_CHARS.sub("_", key.strip()) + ".json"


class JsonFileStorage:
    """Файловый носитель: один ключ = один JSON файл в каталоге данных"""

    def __init__(self, data_dir: Path):
        """
        Args:
            data_dir: Каталог данных (создаётся при первой записи)
        """
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / key_to_filename(key)

    def read(self, key: str) -> Optional[str]:
        """
        Чтение значения.

        Returns:
            Содержимое файла или None, если файла нет или он не в UTF-8

        Raises:
            StorageUnavailableError: файл есть, но прочитать его нельзя
        """
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.debug(f"Слот хранилища не найден: {path}")
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Слот хранилища {path.name} не в UTF-8, игнорируется: {e}")
            return None
        except OSError as e:
            logger.error(f"Ошибка чтения слота хранилища {path}: {e}")
            raise StorageUnavailableError(
                f"Impossible de lire les données ({path.name}): {e}", key=key, original_error=e
            ) from e

    def write(self, key: str, value: str) -> None:
        """
        Атомарная перезапись значения.

        Raises:
            StorageUnavailableError: нет места, нет прав, каталог недоступен
        """
        path = self.path_for(key)
        tmp_path: Optional[str] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
            logger.debug(f"Слот хранилища записан: {path} ({len(value)} символов)")
        except OSError as e:
            logger.error(f"Ошибка записи слота хранилища {path}: {e}")
            raise StorageUnavailableError(
                f"Impossible d'enregistrer les données ({path.name}): {e}", key=key, original_error=e
            ) from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.debug(f"Временный файл уже удалён: {tmp_path}")

    def revision(self, key: str) -> Optional[Tuple[int, int]]:
        """Отпечаток файла (mtime_ns, size) или None, если файла нет"""
        try:
            stat = self.path_for(key).stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug(f"Не удалось получить отпечаток слота {key}: {e}")
            return None
        return stat.st_mtime_ns, stat.st_size


class InMemoryStorage:
    """Носитель в памяти процесса (для тестов и временных сессий)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self._revisions: Dict[str, int] = {key: 1 for key in self._values}
        # Имитация переполненного носителя
        self.fail_writes = False

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("Stockage plein ou indisponible", key=key)
        self._values[key] = value
        self._revisions[key] = self._revisions.get(key, 0) + 1

    def revision(self, key: str) -> Optional[Hashable]:
        return self._revisions.get(key)
