"""
MODULE: marches_publics.services.merge_engine
RESPONSIBILITY: Reconcile an imported record set with the current collection.
ALLOWED: core.models, loguru.
FORBIDDEN: Storage access, notifications, validation (input is already validated).
ERRORS: None (a declined replace returns a cancelled result).

Слияние импортированных записей с текущей коллекцией.

Две стратегии:
- MERGE (добавление): добавляются только записи с новыми id, существующая
  запись никогда не перезаписывается, порядок сохраняется;
- REPLACE (полная замена): текущая коллекция отбрасывается целиком,
  только после явного подтверждения. Отмена невозможна.

Функции не изменяют переданные списки, новая коллекция возвращается
в MergeResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from loguru import logger

from marches_publics.core.models import ContractRecord

# confirm(current_count, incoming_count) -> bool
ReplaceConfirmation = Callable[[int, int], bool]


class ImportStrategy(str, Enum):
    """Стратегия импорта"""
    MERGE = "merge"
    REPLACE = "replace"


@dataclass(frozen=True)
class MergeResult:
    """
    Результат слияния

    Attributes:
        records: Новая коллекция
        imported_count: Сколько записей фактически добавлено/импортировано
        skipped_count: Сколько входящих записей отброшено из-за совпадения id
        cancelled: Замена не подтверждена, коллекция не изменилась
    """
    records: List[ContractRecord]
    imported_count: int
    skipped_count: int = 0
    cancelled: bool = False


def merge_additive(current: Sequence[ContractRecord], incoming: Sequence[ContractRecord]) -> MergeResult:
    """
    Добавление записей с новыми id в конец коллекции.

    Записи с id, уже присутствующим в коллекции, молча отбрасываются.
    """
    existing_ids = {record.id for record in current}
    added: List[ContractRecord] = []
    skipped = 0

    for record in incoming:
        if record.id in existing_ids:
            skipped += 1
            continue
        existing_ids.add(record.id)
        added.append(record)

    logger.info(f"Слияние: добавлено {len(added)}, пропущено (id уже есть) {skipped}")
    return MergeResult(records=list(current) + added, imported_count=len(added), skipped_count=skipped)


def replace_all(
    current: Sequence[ContractRecord],
    incoming: Sequence[ContractRecord],
    confirm: Optional[ReplaceConfirmation],
) -> MergeResult:
    """
    Полная замена коллекции после подтверждения.

    Args:
        current: Текущая коллекция
        incoming: Проверенные входящие записи
        confirm: Запрос подтверждения; None означает отказ
    """
    approved = bool(confirm(len(current), len(incoming))) if confirm is not None else False
    if not approved:
        logger.info(f"Полная замена отменена пользователем (текущих записей: {len(current)})")
        return MergeResult(records=list(current), imported_count=0, cancelled=True)

    logger.warning(f"Полная замена коллекции: {len(current)} -> {len(incoming)} записей")
    return MergeResult(records=list(incoming), imported_count=len(incoming))


def apply_import(
    strategy: ImportStrategy,
    current: Sequence[ContractRecord],
    incoming: Sequence[ContractRecord],
    confirm: Optional[ReplaceConfirmation] = None,
) -> MergeResult:
    """Применение выбранной стратегии импорта"""
    if ImportStrategy(strategy) is ImportStrategy.REPLACE:
        return replace_all(current, incoming, confirm)
    return merge_additive(current, incoming)
