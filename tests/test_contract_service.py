"""
Тесты сервиса каталога: CRUD, импорт/экспорт, документы, заметки
и обработка ошибок на границе (уведомление + последняя коллекция).
"""

import dataclasses
import json

from marches_publics.core.models import ContractDraft, ContractStatus, Document, FilterQuery
from marches_publics.services.contract_service import ContractService
from marches_publics.services.merge_engine import ImportStrategy
from marches_publics.utils.notifications import NotificationLevel


def valid_draft(**overrides):
    values = dict(title="Infrastructure IT Campus Nord", institution="Université de Lille",
                  duration_years=3, status=ContractStatus.IN_PROGRESS, amount=150000,
                  start_date="2024-01-15", end_date="2026-12-31", description="Serveurs")
    values.update(overrides)
    return ContractDraft(**values)


# =============================================================================
# CRUD
# =============================================================================

def test_create_assigns_id_and_timestamps(service, history):
    records = service.create(valid_draft())

    assert len(records) == 1
    record = records[0]
    assert record.id
    assert record.created_at == record.updated_at
    assert record.created_at.endswith("Z")
    assert history.last.level is NotificationLevel.SUCCESS
    assert history.last.message == "Marché créé avec succès"


def test_created_ids_are_distinct(service):
    for index in range(20):
        service.create(valid_draft(title=f"Marché {index}"))

    assert len({record.id for record in service.list()}) == 20


def test_invalid_draft_is_reported_and_not_saved(service, store, history):
    records = service.create(valid_draft(start_date="2025-01-01", end_date="2024-01-01"))

    assert records == []
    assert not store.exists()
    assert history.last.level is NotificationLevel.ERROR
    assert "dateFin" in history.last.details


def test_update_replaces_record_with_same_id(service):
    record = service.create(valid_draft())[0]

    records = service.update(dataclasses.replace(record, title="Infrastructure IT (phase 2)"))

    assert [r.title for r in records] == ["Infrastructure IT (phase 2)"]
    assert records[0].created_at == record.created_at


def test_update_of_unknown_record_notifies_error(service, make_record, history):
    service.update(make_record("inconnu"))

    assert history.last.level is NotificationLevel.ERROR
    assert "introuvable" in history.last.message


def test_delete_removes_record(service, store, sample_records):
    store.save(sample_records)

    records = service.delete("a1")

    assert [record.id for record in records] == ["b2"]
    assert [record.id for record in service.list()] == ["b2"]


def test_storage_failure_is_not_fatal(service, memory_backend, store, sample_records, history):
    store.save(sample_records)
    memory_backend.fail_writes = True

    records = service.create(valid_draft())

    assert [record.id for record in records] == ["a1", "b2"]
    assert history.last.level is NotificationLevel.ERROR

    memory_backend.fail_writes = False
    assert len(service.create(valid_draft())) == 3


# =============================================================================
# Импорт / экспорт
# =============================================================================

def test_import_merge_skips_colliding_ids(service, store, sample_records, make_record, history):
    store.save(sample_records)
    incoming = [dataclasses.replace(sample_records[0], title="Écrasé ?"), make_record("c3")]

    records = service.import_records(incoming, ImportStrategy.MERGE)

    assert [record.id for record in records] == ["a1", "b2", "c3"]
    assert records[0].title == sample_records[0].title
    assert service.last_import.imported_count == 1
    assert history.last.message == "1 marchés importés avec succès!"


def test_replace_without_confirmation_changes_nothing(service, store, sample_records, make_record, history):
    store.save(sample_records)

    records = service.import_records([make_record("z")], ImportStrategy.REPLACE)

    assert [record.id for record in records] == ["a1", "b2"]
    assert [record.id for record in service.list()] == ["a1", "b2"]
    assert service.last_import.cancelled
    assert history.last.level is NotificationLevel.INFO


def test_confirmed_replace_discards_collection(store, notifier, sample_records, make_record):
    store.save(sample_records)
    service = ContractService(store, notifier, confirm_replace=lambda current, incoming: True)

    records = service.import_records([make_record("z")], ImportStrategy.REPLACE)

    assert [record.id for record in records] == ["z"]


def test_unparseable_import_file_changes_nothing(service, store, sample_records, tmp_path, history):
    store.save(sample_records)
    path = tmp_path / "import.json"
    path.write_text("{ invalide", encoding="utf-8")

    service.import_file(path)

    assert history.last.level is NotificationLevel.ERROR
    assert [record.id for record in service.list()] == ["a1", "b2"]


def test_export_then_import_keeps_collection(service, store, sample_records, tmp_path):
    store.save(sample_records)

    path = service.export(tmp_path)
    records = service.import_file(path)

    assert path.exists()
    assert sorted(record.id for record in records) == ["a1", "b2"]
    assert service.last_import.imported_count == 0


# =============================================================================
# Документы
# =============================================================================

def test_document_upload_and_download_keeps_bytes(service, tmp_path):
    record = service.create(valid_draft())[0]
    data = bytes(range(256)) * 3

    records = service.add_document(record.id, "cahier des charges.pdf", "application/pdf", data)
    document = records[0].documents[0]
    path = service.download_document(record.id, document.id, tmp_path / "dl")

    assert document.size == 768
    assert path.name == "cahier des charges.pdf"
    assert path.read_bytes() == data


def test_add_document_from_file(service, tmp_path):
    record = service.create(valid_draft())[0]
    source = tmp_path / "notes.txt"
    source.write_text("Compte rendu", encoding="utf-8")

    records = service.add_document_file(record.id, source)

    assert records[0].documents[0].content == "Compte rendu"
    assert records[0].documents[0].mime_type == "text/plain"


def test_empty_upload_is_ignored(service, history):
    record = service.create(valid_draft())[0]

    service.add_document(record.id, "vide.pdf", "application/pdf", b"")

    assert service.get(record.id).documents == []
    assert history.last.level is NotificationLevel.WARNING


def test_corrupt_document_download_is_cancelled(service, tmp_path, history):
    record = service.create(valid_draft())[0]
    broken = Document(id="doc1", name="casse.pdf", mime_type="application/pdf", size=4,
                      added_at="2024-01-01T00:00:00.000Z", content="data:application/pdf;base64,@@@")
    service.attach_document(record.id, broken)

    assert service.download_document(record.id, "doc1", tmp_path / "dl") is None
    assert history.last.message.startswith("Téléchargement annulé")
    assert not (tmp_path / "dl" / "casse.pdf").exists()


def test_remove_document(service):
    record = service.create(valid_draft())[0]
    records = service.add_document(record.id, "a.pdf", "application/pdf", b"%PDF")
    document_id = records[0].documents[0].id

    records = service.remove_document(record.id, document_id)

    assert records[0].documents == []


# =============================================================================
# Заметки
# =============================================================================

def test_note_lifecycle(service):
    record = service.create(valid_draft())[0]

    note = service.add_note(record.id, "  Réunion de lancement  ")[0].notes[0]
    assert note.content == "Réunion de lancement"
    assert note.author == "Marie Dubois"

    edited = service.edit_note(record.id, note.id, "Réunion reportée")[0].notes[0]
    assert edited.content == "Réunion reportée"
    assert edited.created_at == note.created_at

    assert service.delete_note(record.id, note.id)[0].notes == []


def test_blank_note_is_ignored(service):
    record = service.create(valid_draft())[0]

    service.add_note(record.id, "   ")

    assert service.get(record.id).notes == []


def test_note_author_can_be_given(service):
    record = service.create(valid_draft())[0]

    note = service.add_note(record.id, "Visite du site", author="Jean Martin")[0].notes[0]

    assert note.author == "Jean Martin"


# =============================================================================
# Примеры и статистика
# =============================================================================

def test_initialize_seeds_only_a_fresh_store(service):
    records = service.initialize(seed_examples=True)

    assert [record.title for record in records] == [
        "Infrastructure IT Campus Nord",
        "Rénovation Bibliothèque Centrale",
    ]
    assert records[0].notes[0].author == "Marie Dubois"

    service.delete(records[0].id)
    service.delete(records[1].id)
    assert service.initialize(seed_examples=True) == []


def test_initialize_without_seeding(service):
    assert service.initialize(seed_examples=False) == []


def test_seed_examples_keeps_existing_collection(service, store, sample_records):
    store.save(sample_records)

    records = service.seed_examples()

    assert [record.id for record in records] == ["a1", "b2"]


def test_stats_and_institutions(service, store, sample_records):
    store.save(sample_records)

    stats = service.stats()

    assert (stats.total, stats.in_progress, stats.completed) == (2, 1, 0)
    assert stats.total_amount == 400000
    assert service.institutions() == ["Université de Lille", "Université Paris-Saclay"]


# =============================================================================
# Ранний выход без изменений
# =============================================================================

def test_ignored_operations_on_fresh_service_return_stored_collection(store, notifier, sample_records, tmp_path):
    store.save(sample_records)
    service = ContractService(store, notifier)
    broken = tmp_path / "import.json"
    broken.write_text("{ invalide", encoding="utf-8")

    results = [
        service.import_file(broken),
        service.add_document("a1", "vide.pdf", "application/pdf", b""),
        service.add_document_file("a1", tmp_path / "absent.pdf"),
        service.add_note("a1", "   "),
        service.edit_note("a1", "n1", ""),
    ]

    for records in results:
        assert [record.id for record in records] == ["a1", "b2"]


def test_fractional_duration_is_rejected(service, store, history):
    records = service.create(valid_draft(duration_years=2.5))

    assert records == []
    assert not store.exists()
    assert "nombreAnnees" in history.last.details


def test_whole_float_duration_is_accepted(service):
    records = service.create(valid_draft(duration_years=3.0))

    assert len(records) == 1


def test_filter_skips_stored_element_with_wrong_field_types(service, memory_backend, store, sample_records):
    corrupted = {"id": "x", "titre": 123, "universite": None, "nombreAnnees": 1, "statut": "en_cours"}
    memory_backend.write(store.key, json.dumps([corrupted] + [record.to_dict() for record in sample_records]))

    records = service.filter(FilterQuery(institution="lille"))

    assert [record.id for record in records] == ["a1"]
