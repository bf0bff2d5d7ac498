"""
MODULE: marches_publics.services.contract_store
RESPONSIBILITY: Load and save the whole contract collection under one storage key.
ALLOWED: json, loguru, core.storage backends, core.models, services.validation (structural check).
FORBIDDEN: Partial writes, merge/filter logic, notifications.
ERRORS: StorageUnavailableError (propagated from the backend).

Хранилище коллекции контрактов.

Все изменения делаются по схеме "прочитать всю коллекцию, вычислить новую,
записать всю коллекцию", инкрементальной записи нет.
Хранилище создаётся один раз при старте и передаётся потребителям явно.

Конкурентные писатели: принята модель last-writer-wins. Хранилище помнит
отпечаток слота, который видело последним, и пишет предупреждение в лог,
если перезаписывает слот, изменённый другим процессом.
"""

from __future__ import annotations

import json
from typing import Hashable, Iterable, List, Optional, Sequence

from loguru import logger

from marches_publics.core.interfaces import IStorageBackend
from marches_publics.core.models import ContractRecord
from marches_publics.services.validation import structural_rejection_reason

DEFAULT_STORAGE_KEY = "marches-publics"

_UNSEEN = object()


class ContractStore:
    """Коллекция контрактов, сериализованная в один слот носителя"""

    def __init__(
        self,
        backend: IStorageBackend,
        key: str = DEFAULT_STORAGE_KEY,
        default: Sequence[ContractRecord] = (),
    ):
        """
        Args:
            backend: Носитель (файловый или в памяти)
            key: Имя слота
            default: Коллекция, возвращаемая при отсутствии/повреждении данных
        """
        self.backend = backend
        self.key = key
        self.default = tuple(default)
        self._seen_revision: object = _UNSEEN
        self.conflicts_detected = 0

    def load(self) -> List[ContractRecord]:
        """
        Чтение всей коллекции.

        Returns:
            Сохранённая коллекция или копия default, если данных нет
            или они не разбираются как JSON-массив

        Raises:
            StorageUnavailableError: носитель недоступен
        """
        raw = self.backend.read(self.key)
        self._seen_revision = self.backend.revision(self.key)

        if raw is None:
            logger.debug(f"Коллекция '{self.key}' ещё не сохранялась, используется значение по умолчанию")
            return list(self.default)

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Повреждённые данные в слоте '{self.key}': {e}, используется значение по умолчанию")
            return list(self.default)

        if not isinstance(payload, list):
            logger.warning(f"Слот '{self.key}' содержит {type(payload).__name__} вместо массива")
            return list(self.default)

        records: List[ContractRecord] = []
        for index, item in enumerate(payload):
            reason = structural_rejection_reason(item)
            if reason is not None:
                logger.warning(f"Пропущен повреждённый элемент #{index} слота '{self.key}': {reason}")
                continue
            try:
                records.append(ContractRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Пропущен повреждённый элемент #{index} слота '{self.key}': {e!r}")

        logger.debug(f"Коллекция '{self.key}' загружена: {len(records)} записей")
        return records

    def save(self, records: Iterable[ContractRecord]) -> None:
        """
        Полная перезапись коллекции.

        Raises:
            StorageUnavailableError: носитель отказал в записи
        """
        records = list(records)
        current_revision = self.backend.revision(self.key)
        if self._seen_revision is not _UNSEEN and current_revision != self._seen_revision:
            self.conflicts_detected += 1
            logger.warning(
                f"Слот '{self.key}' изменён другим процессом после последнего чтения, "
                f"перезаписываем (last-writer-wins)"
            )

        payload = json.dumps([record.to_dict() for record in records], ensure_ascii=False)
        self.backend.write(self.key, payload)
        self._seen_revision = self.backend.revision(self.key)
        logger.info(f"Коллекция '{self.key}' сохранена: {len(records)} записей")

    def exists(self) -> bool:
        """
        Сохранялась ли коллекция хотя бы раз.

        Raises:
            StorageUnavailableError: носитель недоступен
        """
        return self.backend.read(self.key) is not None

    @property
    def seen_revision(self) -> Optional[Hashable]:
        return None if self._seen_revision is _UNSEEN else self._seen_revision
