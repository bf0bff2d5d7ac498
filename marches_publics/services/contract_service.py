"""
MODULE: marches_publics.services.contract_service
RESPONSIBILITY: Operations exposed to the presentation layer (CRUD, import/export, documents, notes).
ALLOWED: services.*, core.models, utils, loguru.
FORBIDDEN: Direct file/JSON handling of the persisted slot (only through ContractStore).
ERRORS: None propagated for AppError: failures are logged, notified and the last known collection is returned.

Сервис каталога контрактов.

Каждая изменяющая операция: прочитать всю коллекцию из хранилища,
вычислить новую, записать целиком, отправить уведомление, вернуть
новую коллекцию для перерисовки. Ошибки (AppError) обрабатываются
здесь же: лог + уведомление об ошибке, возвращается последняя
известная коллекция, работа продолжается.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from loguru import logger

from marches_publics.core.interfaces import INotifier
from marches_publics.core.models import (
    ContractDraft,
    ContractRecord,
    ContractStatus,
    Document,
    FilterQuery,
    Note,
)
from marches_publics.errors import AppError, CodecError, RecordNotFoundError, ValidationError
from marches_publics.services import document_codec
from marches_publics.services.contract_store import ContractStore
from marches_publics.services.filter_engine import filter_records
from marches_publics.services.import_export import export_collection, read_import_file
from marches_publics.services.merge_engine import (
    ImportStrategy,
    MergeResult,
    ReplaceConfirmation,
    apply_import,
)
from marches_publics.services.stats_service import DashboardStats, compute_stats, list_institutions
from marches_publics.services.validation import ImportBatch, ensure_valid_contract
from marches_publics.utils.clock import utc_now_iso
from marches_publics.utils.id_generator import generate_id

CollectionChange = Callable[[List[ContractRecord]], List[ContractRecord]]
RecordChange = Callable[[ContractRecord], ContractRecord]


class ContractService:
    """Сервис операций над каталогом контрактов"""

    def __init__(
        self,
        store: ContractStore,
        notifier: INotifier,
        default_author: str = "Utilisateur",
        strict_import: bool = False,
        confirm_replace: Optional[ReplaceConfirmation] = None,
        export_dir: Optional[Path] = None,
        download_dir: Optional[Path] = None,
    ):
        """
        Args:
            store: Хранилище коллекции (создаётся один раз при старте)
            notifier: Получатель кратковременных уведомлений
            default_author: Автор заметки по умолчанию
            strict_import: Проверять ли инварианты дат/суммы при импорте
            confirm_replace: Запрос подтверждения полной замены по умолчанию
            export_dir: Каталог экспорта по умолчанию
            download_dir: Каталог скачивания документов по умолчанию
        """
        self.store = store
        self.notifier = notifier
        self.default_author = default_author
        self.strict_import = strict_import
        self.confirm_replace = confirm_replace
        self.export_dir = Path(export_dir) if export_dir else Path.cwd()
        self.download_dir = Path(download_dir) if download_dir else Path.cwd()
        self.last_import: Optional[MergeResult] = None
        self._records: List[ContractRecord] = []

    # Общие механизмы

    def _fail(self, operation: str, error: Exception) -> List[ContractRecord]:
        """Обработка ошибки на границе: лог, уведомление, последняя известная коллекция"""
        logger.warning(f"Операция '{operation}' не выполнена: {error}")
        details = error.errors if isinstance(error, ValidationError) else None
        self.notifier.error(str(error), details)
        return list(self._records)

    def _mutate(self, operation: str, change: CollectionChange, success_message: str) -> List[ContractRecord]:
        """Прочитать всё -> вычислить новую коллекцию -> записать всё"""
        try:
            records = self.store.load()
            self._records = records
            updated = change(list(records))
            self.store.save(updated)
        except AppError as e:
            return self._fail(operation, e)

        self._records = updated
        logger.info(f"Операция '{operation}' выполнена, записей: {len(updated)}")
        self.notifier.success(success_message)
        return list(updated)

    @staticmethod
    def _index_of(records: Sequence[ContractRecord], contract_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == contract_id:
                return index
        raise RecordNotFoundError(f"Marché introuvable: {contract_id}", record_id=contract_id)

    def _change_contract(self, contract_id: str, change: RecordChange) -> CollectionChange:
        """Изменение одной записи коллекции с обновлением даты изменения"""
        def apply(records: List[ContractRecord]) -> List[ContractRecord]:
            index = self._index_of(records, contract_id)
            changed = change(records[index])
            records[index] = dataclasses.replace(changed, updated_at=utc_now_iso())
            return records
        return apply

    # Чтение

    def list(self) -> List[ContractRecord]:
        """Вся коллекция"""
        try:
            self._records = self.store.load()
        except AppError as e:
            return self._fail("list", e)
        return list(self._records)

    def filter(self, query: FilterQuery) -> List[ContractRecord]:
        """Записи, прошедшие фильтр (порядок коллекции сохраняется)"""
        return filter_records(self.list(), query)

    def get(self, contract_id: str) -> Optional[ContractRecord]:
        return next((record for record in self.list() if record.id == contract_id), None)

    def stats(self) -> DashboardStats:
        return compute_stats(self.list())

    def institutions(self) -> List[str]:
        return list_institutions(self.list())

    # CRUD

    def create(self, draft: ContractDraft) -> List[ContractRecord]:
        """Создание контракта со сгенерированным id и метками времени"""
        def change(records: List[ContractRecord]) -> List[ContractRecord]:
            ensure_valid_contract(draft)
            record = ContractRecord.from_draft(draft, generate_id(), utc_now_iso())
            logger.debug(f"Создан контракт {record.id}: {record.title}")
            return records + [record]

        return self._mutate("create", change, "Marché créé avec succès")

    def update(self, record: ContractRecord) -> List[ContractRecord]:
        """Замена записи с тем же id (дата изменения обновляется)"""
        def change(records: List[ContractRecord]) -> List[ContractRecord]:
            ensure_valid_contract(record)
            index = self._index_of(records, record.id)
            records[index] = dataclasses.replace(record, updated_at=utc_now_iso())
            return records

        return self._mutate("update", change, "Marché mis à jour")

    def delete(self, contract_id: str) -> List[ContractRecord]:
        """Удаление записи вместе с её документами и заметками"""
        def change(records: List[ContractRecord]) -> List[ContractRecord]:
            index = self._index_of(records, contract_id)
            return records[:index] + records[index + 1:]

        return self._mutate("delete", change, "Marché supprimé")

    # Импорт / экспорт

    def import_records(
        self,
        incoming: Union[ImportBatch, Sequence[ContractRecord]],
        strategy: ImportStrategy = ImportStrategy.MERGE,
        confirm: Optional[ReplaceConfirmation] = None,
    ) -> List[ContractRecord]:
        """
        Импорт проверенных записей выбранной стратегией.

        При полной замене коллекция не меняется до получения подтверждения.
        Количество добавленных записей доступно в self.last_import.
        """
        accepted = incoming.accepted if isinstance(incoming, ImportBatch) else list(incoming)
        rejected = len(incoming.rejected) if isinstance(incoming, ImportBatch) else 0

        try:
            current = self.store.load()
            self._records = current
            result = apply_import(strategy, current, accepted, confirm or self.confirm_replace)
            self.last_import = result
            if result.cancelled:
                self.notifier.info("Import annulé, aucune donnée modifiée")
                return list(current)
            self.store.save(result.records)
        except AppError as e:
            return self._fail("import", e)

        self._records = result.records
        details = {"ignorés (id existant)": result.skipped_count} if result.skipped_count else {}
        if rejected:
            details["rejetés (format)"] = rejected
        self.notifier.success(f"{result.imported_count} marchés importés avec succès!", details or None)
        return list(result.records)

    def import_file(
        self,
        path: Path,
        strategy: ImportStrategy = ImportStrategy.MERGE,
        confirm: Optional[ReplaceConfirmation] = None,
    ) -> List[ContractRecord]:
        """Импорт из JSON файла (ошибка разбора -> без изменений)"""
        try:
            batch = read_import_file(path, strict=self.strict_import)
        except AppError as e:
            logger.warning(f"Импорт файла {path} отклонён: {e}")
            self.notifier.error(f"Erreur lors de l'import: {e}")
            return self.list()
        return self.import_records(batch, strategy, confirm)

    def export(self, target_dir: Optional[Path] = None) -> Optional[Path]:
        """Экспорт всей коллекции в marches_publics_<дата>.json"""
        try:
            records = self.store.load()
            self._records = records
            path = export_collection(records, target_dir or self.export_dir)
        except AppError as e:
            self._fail("export", e)
            return None
        except OSError as e:
            logger.error(f"Ошибка записи файла экспорта: {e}")
            self.notifier.error(f"Erreur lors de l'export: {e}")
            return None
        self.notifier.success(f"{len(records)} marchés exportés", {"fichier": str(path)})
        return path

    # Документы

    def add_document(self, contract_id: str, name: str, mime_type: Optional[str],
                     data: Optional[bytes]) -> List[ContractRecord]:
        """Добавление документа из байтов загруженного файла"""
        document = document_codec.encode_document(name, mime_type, data)
        if document is None:
            self.notifier.warning(f"Fichier vide ignoré: {name}")
            return self.list()
        return self.attach_document(contract_id, document)

    def add_document_file(self, contract_id: str, path: Path,
                          mime_type: Optional[str] = None) -> List[ContractRecord]:
        """Добавление документа из файла на диске"""
        try:
            document = document_codec.encode_file(Path(path), mime_type)
        except OSError as e:
            logger.error(f"Не удалось прочитать файл документа {path}: {e}")
            self.notifier.error(f"Impossible de lire le fichier: {e}")
            return self.list()
        if document is None:
            self.notifier.warning(f"Fichier vide ignoré: {Path(path).name}")
            return self.list()
        return self.attach_document(contract_id, document)

    def attach_document(self, contract_id: str, document: Document) -> List[ContractRecord]:
        def change(record: ContractRecord) -> ContractRecord:
            return dataclasses.replace(record, documents=record.documents + [document])

        return self._mutate("add_document", self._change_contract(contract_id, change), "Document ajouté")

    def remove_document(self, contract_id: str, document_id: str) -> List[ContractRecord]:
        def change(record: ContractRecord) -> ContractRecord:
            if record.find_document(document_id) is None:
                raise RecordNotFoundError(f"Document introuvable: {document_id}", record_id=document_id)
            return dataclasses.replace(
                record, documents=[doc for doc in record.documents if doc.id != document_id]
            )

        return self._mutate("remove_document", self._change_contract(contract_id, change), "Document supprimé")

    def download_document(self, contract_id: str, document_id: str,
                          target_dir: Optional[Path] = None) -> Optional[Path]:
        """
        Восстановление документа в файл.

        Returns:
            Путь к файлу или None (повреждённое содержимое, нет документа),
            частичный файл при ошибке не создаётся
        """
        try:
            record = self.get(contract_id)
            if record is None:
                raise RecordNotFoundError(f"Marché introuvable: {contract_id}", record_id=contract_id)
            document = record.find_document(document_id)
            if document is None:
                raise RecordNotFoundError(f"Document introuvable: {document_id}", record_id=document_id)
            blob = document_codec.decode_document(document)
            path = document_codec.write_blob(blob, target_dir or self.download_dir)
        except CodecError as e:
            logger.error(f"Скачивание документа {document_id} прервано: {e}")
            self.notifier.error(f"Téléchargement annulé: {e}")
            return None
        except AppError as e:
            self._fail("download_document", e)
            return None
        except OSError as e:
            logger.error(f"Ошибка записи документа {document_id}: {e}")
            self.notifier.error(f"Téléchargement annulé: {e}")
            return None
        return path

    # Заметки

    def add_note(self, contract_id: str, text: str, author: Optional[str] = None) -> List[ContractRecord]:
        """Добавление заметки (пустой текст игнорируется)"""
        content = (text or "").strip()
        if not content:
            logger.debug("Пустая заметка не добавлена")
            return self.list()

        note = Note(
            id=generate_id(),
            content=content,
            created_at=utc_now_iso(),
            author=author or self.default_author,
        )

        def change(record: ContractRecord) -> ContractRecord:
            return dataclasses.replace(record, notes=record.notes + [note])

        return self._mutate("add_note", self._change_contract(contract_id, change), "Note ajoutée")

    def edit_note(self, contract_id: str, note_id: str, text: str) -> List[ContractRecord]:
        """Изменение текста заметки (пустой текст игнорируется)"""
        content = (text or "").strip()
        if not content:
            logger.debug("Пустой текст заметки, изменение пропущено")
            return self.list()

        def change(record: ContractRecord) -> ContractRecord:
            if record.find_note(note_id) is None:
                raise RecordNotFoundError(f"Note introuvable: {note_id}", record_id=note_id)
            notes = [dataclasses.replace(note, content=content) if note.id == note_id else note
                     for note in record.notes]
            return dataclasses.replace(record, notes=notes)

        return self._mutate("edit_note", self._change_contract(contract_id, change), "Note modifiée")

    def delete_note(self, contract_id: str, note_id: str) -> List[ContractRecord]:
        def change(record: ContractRecord) -> ContractRecord:
            if record.find_note(note_id) is None:
                raise RecordNotFoundError(f"Note introuvable: {note_id}", record_id=note_id)
            return dataclasses.replace(record, notes=[note for note in record.notes if note.id != note_id])

        return self._mutate("delete_note", self._change_contract(contract_id, change), "Note supprimée")

    # Примеры данных

    def initialize(self, seed_examples: bool = True) -> List[ContractRecord]:
        """Первая загрузка: примеры создаются, только если слот ещё ни разу не сохранялся"""
        try:
            initialized = self.store.exists()
        except AppError as e:
            return self._fail("initialize", e)
        if seed_examples and not initialized:
            logger.info("Коллекция не найдена, добавляются примеры")
            return self.seed_examples()
        return self.list()

    def seed_examples(self) -> List[ContractRecord]:
        """Создание двух примеров, если коллекция пуста"""
        def change(records: List[ContractRecord]) -> List[ContractRecord]:
            if records:
                return records
            return [ContractRecord.from_draft(draft, generate_id(), utc_now_iso())
                    for draft in example_drafts()]

        current = self.list()
        if current:
            return current
        return self._mutate("seed_examples", change, "Exemples de marchés ajoutés")


def example_drafts(author: str = "Marie Dubois") -> List[ContractDraft]:
    """Примеры контрактов для пустого каталога"""
    return [
        ContractDraft(
            title="Infrastructure IT Campus Nord",
            institution="Université de Lille",
            duration_years=3,
            status=ContractStatus.IN_PROGRESS,
            amount=150000,
            start_date="2024-01-15",
            end_date="2026-12-31",
            description=(
                "Modernisation complète de l'infrastructure informatique du campus nord "
                "incluant serveurs, réseaux et équipements."
            ),
            notes=[Note(
                id=generate_id(),
                content="Réunion initiale programmée pour la semaine prochaine avec l'équipe technique.",
                created_at=utc_now_iso(),
                author=author,
            )],
        ),
        ContractDraft(
            title="Rénovation Bibliothèque Centrale",
            institution="Université Paris-Saclay",
            duration_years=2,
            status=ContractStatus.PENDING,
            amount=250000,
            start_date="2024-06-01",
            end_date="2026-05-31",
            description=(
                "Rénovation complète de la bibliothèque centrale avec création d'espaces "
                "collaboratifs et mise aux normes énergétiques."
            ),
        ),
    ]
