"""
MODULE: marches_publics.services.filter_engine
RESPONSIBILITY: Evaluate records against the composite list filter.
ALLOWED: core.models.
FORBIDDEN: Storage access, sorting.
ERRORS: None.

Фильтрация списка контрактов.

Запись проходит фильтр, если одновременно (AND):
- статус не задан или совпадает точно;
- учреждение не задано или является подстрокой (без учёта регистра);
- строка поиска не задана или является подстрокой названия
  или описания (без учёта регистра).
Порядок результата совпадает с порядком входной коллекции.
"""

from typing import Iterable, List, Optional

from marches_publics.core.models import ContractRecord, FilterQuery


def _normalize(value: Optional[str]) -> str:
    if value is None:
        return ""
    return getattr(value, "value", value)


def matches(record: ContractRecord, query: FilterQuery) -> bool:
    """Проходит ли запись фильтр"""
    status = _normalize(query.status)
    if status and record.status.value != status:
        return False

    institution = _normalize(query.institution).lower()
    if institution and institution not in record.institution.lower():
        return False

    search = _normalize(query.search).lower()
    if search and search not in record.title.lower() and search not in record.description.lower():
        return False

    return True


def filter_records(records: Iterable[ContractRecord], query: Optional[FilterQuery] = None) -> List[ContractRecord]:
    """Упорядоченная подпоследовательность записей, прошедших фильтр"""
    if query is None:
        return list(records)
    return [record for record in records if matches(record, query)]
