"""
Общие фикстуры тестов каталога.
"""

import pytest

from marches_publics.core.models import ContractRecord, ContractStatus
from marches_publics.core.storage import InMemoryStorage, JsonFileStorage
from marches_publics.services.contract_service import ContractService
from marches_publics.services.contract_store import ContractStore
from marches_publics.utils.notifications import NotificationHistory, NotificationManager


def build_record(record_id="r1", title="Infrastructure IT Campus Nord", institution="Université de Lille",
                 status=ContractStatus.IN_PROGRESS, amount=150000, start_date="2024-01-15",
                 end_date="2026-12-31", description="", **kwargs) -> ContractRecord:
    return ContractRecord(
        id=record_id,
        title=title,
        institution=institution,
        duration_years=kwargs.pop("duration_years", 3),
        status=ContractStatus(status),
        amount=amount,
        start_date=start_date,
        end_date=end_date,
        description=description,
        created_at=kwargs.pop("created_at", "2024-01-01T00:00:00.000Z"),
        updated_at=kwargs.pop("updated_at", "2024-01-01T00:00:00.000Z"),
        **kwargs,
    )


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def sample_records():
    return [
        build_record("a1", "Infrastructure IT Campus Nord", "Université de Lille", ContractStatus.IN_PROGRESS,
                     description="Serveurs et réseaux"),
        build_record("b2", "Rénovation Bibliothèque Centrale", "Université Paris-Saclay", ContractStatus.PENDING,
                     amount=250000, start_date="2024-06-01", end_date="2026-05-31"),
    ]


@pytest.fixture
def memory_backend():
    return InMemoryStorage()


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def file_backend(data_dir):
    return JsonFileStorage(data_dir)


@pytest.fixture
def store(memory_backend):
    return ContractStore(memory_backend)


@pytest.fixture
def history():
    return NotificationHistory(ttl=3.0)


@pytest.fixture
def notifier(history):
    return NotificationManager([history])


@pytest.fixture
def service(store, notifier, tmp_path):
    return ContractService(
        store,
        notifier,
        default_author="Marie Dubois",
        export_dir=tmp_path / "exports",
        download_dir=tmp_path / "downloads",
    )
