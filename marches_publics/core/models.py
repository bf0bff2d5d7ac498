"""
MODULE: marches_publics.core.models
RESPONSIBILITY: Define domain data structures (dataclasses, enums).
ALLOWED: Dataclasses, Enums, Typing.
FORBIDDEN: Business logic, storage operations.
ERRORS: ValueError/TypeError from from_dict on malformed input.

Модели данных каталога публичных закупок

Модуль содержит dataclass модели:
- Контракт (запись каталога) со вложенными документами и заметками
- Черновик контракта (данные формы без id и меток времени)
- Параметры фильтрации списка

Имена атрибутов английские, имена ключей в хранилище и файлах
экспорта совпадают с исходной схемой (titre, universite, ...).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ContractStatus(str, Enum):
    """Статусы контракта (значения совпадают с хранимыми)"""
    IN_PROGRESS = "en_cours"
    COMPLETED = "termine"
    SUSPENDED = "suspendu"
    PENDING = "en_attente"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


STATUS_LABELS: Dict[ContractStatus, str] = {
    ContractStatus.IN_PROGRESS: "En cours",
    ContractStatus.COMPLETED: "Terminé",
    ContractStatus.SUSPENDED: "Suspendu",
    ContractStatus.PENDING: "En attente",
}

CONTRACT_KEYS = (
    "id", "titre", "universite", "nombreAnnees", "statut", "montant",
    "dateDebut", "dateFin", "description", "documents", "notes",
    "dateCreation", "dateModification",
)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


@dataclass
class Document:
    """
    Документ, вложенный в контракт

    Attributes:
        id: Уникальный идентификатор документа
        name: Отображаемое имя файла
        mime_type: MIME тип, заявленный при загрузке
        size: Размер исходного файла в байтах
        added_at: Дата добавления (ISO)
        content: Текст файла или строка data:<mime>;base64,<payload>
    """
    id: str
    name: str
    mime_type: str
    size: int
    added_at: str
    content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "nom": self.name,
            "type": self.mime_type,
            "taille": self.size,
            "dateAjout": self.added_at,
        }
        if self.content is not None:
            data["contenu"] = self.content
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        size = data.get("taille", 0)
        return cls(
            id=_as_str(data.get("id")),
            name=_as_str(data.get("nom")),
            mime_type=_as_str(data.get("type"), "application/octet-stream"),
            size=size if isinstance(size, int) and not isinstance(size, bool) else 0,
            added_at=_as_str(data.get("dateAjout")),
            content=data.get("contenu") if isinstance(data.get("contenu"), str) else None,
        )


@dataclass
class Note:
    """
    Заметка к контракту

    Attributes:
        id: Уникальный идентификатор заметки
        content: Текст заметки
        created_at: Дата создания (ISO)
        author: Имя автора (свободный текст)
    """
    id: str
    content: str
    created_at: str
    author: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "contenu": self.content,
            "dateCreation": self.created_at,
            "auteur": self.author,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=_as_str(data.get("id")),
            content=_as_str(data.get("contenu")),
            created_at=_as_str(data.get("dateCreation")),
            author=_as_str(data.get("auteur")),
        )


@dataclass
class ContractDraft:
    """
    Данные контракта без id и меток времени (то, что приходит из формы)
    """
    title: str
    institution: str
    duration_years: int = 1
    status: ContractStatus = ContractStatus.PENDING
    amount: float = 0
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    documents: List[Document] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)


@dataclass
class ContractRecord:
    """
    Контракт публичной закупки (корневая сущность каталога)

    Attributes:
        id: Уникальный идентификатор
        title: Название контракта
        institution: Учреждение-владелец (университет)
        duration_years: Длительность в годах
        status: Статус контракта
        amount: Сумма контракта
        start_date: Дата начала (YYYY-MM-DD)
        end_date: Дата окончания (YYYY-MM-DD)
        description: Свободное описание
        documents: Вложенные документы (порядок сохраняется)
        notes: Вложенные заметки (порядок сохраняется)
        created_at: Дата создания записи (ISO)
        updated_at: Дата последнего изменения (ISO)
        extra: Неизвестные ключи исходного объекта, сохраняются как есть
    """
    id: str
    title: str
    institution: str
    duration_years: int
    status: ContractStatus
    amount: float
    start_date: str
    end_date: str
    description: str
    documents: List[Document] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_draft(cls, draft: ContractDraft, record_id: str, timestamp: str) -> "ContractRecord":
        return cls(
            id=record_id,
            title=draft.title,
            institution=draft.institution,
            duration_years=draft.duration_years,
            status=ContractStatus(draft.status),
            amount=draft.amount,
            start_date=draft.start_date,
            end_date=draft.end_date,
            description=draft.description,
            documents=list(draft.documents),
            notes=list(draft.notes),
            created_at=timestamp,
            updated_at=timestamp,
        )

    def find_document(self, document_id: str) -> Optional[Document]:
        return next((doc for doc in self.documents if doc.id == document_id), None)

    def find_note(self, note_id: str) -> Optional[Note]:
        return next((note for note in self.notes if note.id == note_id), None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "titre": self.title,
            "universite": self.institution,
            "nombreAnnees": self.duration_years,
            "statut": self.status.value,
            "montant": self.amount,
            "dateDebut": self.start_date,
            "dateFin": self.end_date,
            "description": self.description,
            "documents": [doc.to_dict() for doc in self.documents],
            "notes": [note.to_dict() for note in self.notes],
            "dateCreation": self.created_at,
            "dateModification": self.updated_at,
        }
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractRecord":
        """
        Построение записи из JSON-объекта.

        Обязательные поля (id, titre, universite, nombreAnnees, statut)
        должны быть проверены заранее (см. services.validation),
        остальные заполняются значениями по умолчанию.

        Raises:
            ValueError: неизвестный статус
        """
        amount = data.get("montant", 0)
        if not isinstance(amount, (int, float)) or isinstance(amount, bool):
            amount = 0
        return cls(
            id=data["id"],
            title=data["titre"],
            institution=data["universite"],
            duration_years=data["nombreAnnees"],
            status=ContractStatus(data["statut"]),
            amount=amount,
            start_date=_as_str(data.get("dateDebut")),
            end_date=_as_str(data.get("dateFin")),
            description=_as_str(data.get("description")),
            documents=[Document.from_dict(doc) for doc in _as_list(data.get("documents")) if isinstance(doc, dict)],
            notes=[Note.from_dict(note) for note in _as_list(data.get("notes")) if isinstance(note, dict)],
            created_at=_as_str(data.get("dateCreation")),
            updated_at=_as_str(data.get("dateModification")),
            extra={key: value for key, value in data.items() if key not in CONTRACT_KEYS},
        )


@dataclass(frozen=True)
class FilterQuery:
    """
    Параметры фильтрации списка (пустая строка = без ограничения)

    Attributes:
        status: Точное значение статуса
        institution: Подстрока названия учреждения (без учёта регистра)
        search: Подстрока названия или описания (без учёта регистра)
    """
    status: str = ""
    institution: str = ""
    search: str = ""
