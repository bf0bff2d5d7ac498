"""
MODULE: marches_publics.services.validation
RESPONSIBILITY: Typed parse of external records and edit-time invariant checks.
ALLOWED: core.models, utils.clock, loguru.
FORBIDDEN: Storage access, merge logic.
ERRORS: None raised by parse_* (rejections are returned); ValidationError from ensure_valid_*.

Валидация записей.

Два уровня проверки:
1. Структурная (импорт): объект с строковыми id/titre/universite,
   числовым nombreAnnees и statut из фиксированного списка.
   Результат разбора - либо типизированная запись, либо причина отказа.
2. Смысловая (создание/редактирование): обязательные поля, целая длительность
   не меньше 1, сумма не отрицательна, дата окончания строго после
   даты начала.

При импорте смысловая проверка применяется только в строгом режиме
(strict_import). В обычном режиме нарушения лишь пишутся в лог.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from loguru import logger

from marches_publics.core.models import ContractDraft, ContractRecord, ContractStatus
from marches_publics.errors import ValidationError
from marches_publics.utils.clock import parse_calendar_date

REQUIRED_STRING_FIELDS = ("id", "titre", "universite")


@dataclass(frozen=True)
class Rejection:
    """Отклонённый элемент пакета импорта"""
    index: int
    reason: str


@dataclass(frozen=True)
class ParseOutcome:
    """Результат разбора одного элемента: запись либо причина отказа"""
    record: Optional[ContractRecord] = None
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


@dataclass
class ImportBatch:
    """Пакет импорта после валидации"""
    accepted: List[ContractRecord] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_whole_number(value: Any) -> bool:
    if not _is_number(value):
        return False
    return isinstance(value, int) or value.is_integer()


def structural_rejection_reason(value: Any) -> Optional[str]:
    """Причина структурного отказа или None, если элемент проходит"""
    if not isinstance(value, dict):
        return f"not an object ({type(value).__name__})"
    for key in REQUIRED_STRING_FIELDS:
        if not isinstance(value.get(key), str):
            return f"'{key}' must be a string"
    if not _is_number(value.get("nombreAnnees")):
        return "'nombreAnnees' must be a number"
    if value.get("statut") not in ContractStatus.values():
        return f"'statut' must be one of {ContractStatus.values()}"
    return None


def check_contract_fields(data: Union[ContractDraft, ContractRecord]) -> Dict[str, str]:
    """
    Смысловая проверка полей контракта.

    Returns:
        Словарь поле -> сообщение (пустой, если всё корректно)
    """
    errors: Dict[str, str] = {}

    if not (data.title or "").strip():
        errors["titre"] = "Le titre est requis"
    if not (data.institution or "").strip():
        errors["universite"] = "L'université est requise"
    if not _is_whole_number(data.duration_years) or data.duration_years < 1:
        errors["nombreAnnees"] = "Le nombre d'années doit être un entier positif"
    if not _is_number(data.amount) or data.amount < 0:
        errors["montant"] = "Le montant ne peut pas être négatif"

    start = end = None
    if not data.start_date:
        errors["dateDebut"] = "La date de début est requise"
    else:
        try:
            start = parse_calendar_date(data.start_date)
        except ValueError:
            errors["dateDebut"] = "La date de début est invalide"

    if not data.end_date:
        errors["dateFin"] = "La date de fin est requise"
    else:
        try:
            end = parse_calendar_date(data.end_date)
        except ValueError:
            errors["dateFin"] = "La date de fin est invalide"

    if start is not None and end is not None and start >= end:
        errors["dateFin"] = "La date de fin doit être après la date de début"

    return errors


def ensure_valid_contract(data: Union[ContractDraft, ContractRecord]) -> None:
    """
    Raises:
        ValidationError: если есть нарушения (со словарём ошибок)
    """
    errors = check_contract_fields(data)
    if errors:
        raise ValidationError("Données du marché invalides: " + "; ".join(errors.values()), errors)


def parse_contract(value: Any, strict: bool = False) -> ParseOutcome:
    """
    Разбор одного внешнего элемента в ContractRecord.

    Args:
        value: Элемент JSON массива
        strict: Применять ли смысловые инварианты (даты, сумма)
    """
    reason = structural_rejection_reason(value)
    if reason is not None:
        return ParseOutcome(reason=reason)

    try:
        record = ContractRecord.from_dict(value)
    except (KeyError, TypeError, ValueError) as e:
        return ParseOutcome(reason=f"malformed record: {e!r}")

    violations = check_contract_fields(record)
    if violations:
        summary = "; ".join(f"{key}: {message}" for key, message in violations.items())
        if strict:
            return ParseOutcome(reason=f"invariant violated ({summary})")
        logger.warning(f"Импортируемая запись {record.id} нарушает инварианты: {summary}")

    return ParseOutcome(record=record)


def validate_batch(values: Iterable[Any], strict: bool = False) -> ImportBatch:
    """
    Валидация пакета импорта.

    Неподходящие элементы исключаются из пакета (не ошибка импорта),
    повтор id внутри пакета отклоняется (первое вхождение побеждает).
    """
    batch = ImportBatch()
    seen_ids: Set[str] = set()

    for index, value in enumerate(values):
        outcome = parse_contract(value, strict=strict)
        if outcome.record is None:
            batch.rejected.append(Rejection(index=index, reason=outcome.reason or "rejected"))
            logger.debug(f"Элемент #{index} отклонён: {outcome.reason}")
            continue
        if outcome.record.id in seen_ids:
            batch.rejected.append(Rejection(index=index, reason=f"duplicate id '{outcome.record.id}' in batch"))
            logger.debug(f"Элемент #{index} отклонён: повтор id {outcome.record.id}")
            continue
        seen_ids.add(outcome.record.id)
        batch.accepted.append(outcome.record)

    if batch.rejected:
        logger.warning(f"Пакет импорта: принято {len(batch.accepted)}, отклонено {len(batch.rejected)}")
    return batch
