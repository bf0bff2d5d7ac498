"""
Сводная статистика по коллекции для панели и список учреждений для фильтра.
"""

from dataclasses import dataclass
from typing import Iterable, List

from marches_publics.core.models import ContractRecord, ContractStatus


@dataclass(frozen=True)
class DashboardStats:
    total: int
    in_progress: int
    completed: int
    total_amount: float


def compute_stats(records: Iterable[ContractRecord]) -> DashboardStats:
    records = list(records)
    return DashboardStats(
        total=len(records),
        in_progress=sum(1 for r in records if r.status is ContractStatus.IN_PROGRESS),
        completed=sum(1 for r in records if r.status is ContractStatus.COMPLETED),
        total_amount=sum(r.amount for r in records),
    )


def list_institutions(records: Iterable[ContractRecord]) -> List[str]:
    """Уникальные учреждения в порядке первого появления"""
    seen = {}
    for record in records:
        seen.setdefault(record.institution, None)
    return list(seen)
