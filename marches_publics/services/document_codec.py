"""
MODULE: marches_publics.services.document_codec
RESPONSIBILITY: Convert uploaded file bytes to a storable string and back to a downloadable blob.
ALLOWED: base64, binascii, mimetypes, pathlib, loguru, core.models.
FORBIDDEN: Storage access, notifications.
ERRORS: CodecError (corrupt embedded-binary content, missing content).

Кодек документов.

Кодирование:
- текстовые типы (text/*, JSON/XML/CSV по MIME или расширению) хранятся
  как декодированный текст;
- остальные хранятся строкой data:<mime>;base64,<payload>.

Декодирование раскодирует корректную строку data:<mime>;base64 в байты,
у текстовых типов иначе возвращает UTF-8 байты текста. Для бинарного пути
decode(encode(x)) == x побайтно.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from marches_publics.core.models import Document
from marches_publics.errors import CodecError
from marches_publics.utils.clock import utc_now_iso
from marches_publics.utils.id_generator import generate_id

DEFAULT_MIME_TYPE = "application/octet-stream"
DATA_URL_PREFIX = "data:"
BASE64_MARKER = ";base64"

# Структурированные текстовые форматы, которые хранятся как текст
TEXT_EXTENSIONS = (".json", ".xml", ".csv")
TEXT_MIME_TYPES = ("application/json", "application/xml", "text/csv")

# Форматы, предлагаемые при выборе файла
ACCEPTED_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".json", ".jpg", ".jpeg", ".png")


@dataclass(frozen=True)
class DecodedBlob:
    """Восстановленный файл для скачивания"""
    name: str
    mime_type: str
    data: bytes


def is_text_type(mime_type: Optional[str], file_name: str = "") -> bool:
    """Хранить ли файл как текст (по MIME типу или расширению)"""
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime.startswith("text/") or mime in TEXT_MIME_TYPES:
        return True
    return file_name.lower().endswith(TEXT_EXTENSIONS)


def build_data_url(mime_type: str, data: bytes) -> str:
    """Строка data:<mime>;base64,<payload>"""
    payload = base64.b64encode(data).decode("ascii")
    return f"{DATA_URL_PREFIX}{mime_type or DEFAULT_MIME_TYPE}{BASE64_MARKER},{payload}"


def encode_content(name: str, mime_type: str, data: bytes) -> str:
    """Хранимое представление содержимого файла"""
    if is_text_type(mime_type, name):
        return data.decode("utf-8", errors="replace")
    return build_data_url(mime_type, data)


def encode_document(name: str, mime_type: Optional[str], data: Optional[bytes]) -> Optional[Document]:
    """
    Создание документа из байтов загруженного файла.

    Args:
        name: Имя файла
        mime_type: Заявленный MIME тип (пустой -> application/octet-stream)
        data: Содержимое файла

    Returns:
        Document или None, если содержимого нет
    """
    if not data:
        logger.warning(f"Пустой файл '{name}' не добавлен")
        return None

    mime = mime_type or DEFAULT_MIME_TYPE
    document = Document(
        id=generate_id(),
        name=name,
        mime_type=mime,
        size=len(data),
        added_at=utc_now_iso(),
        content=encode_content(name, mime, data),
    )
    logger.debug(
        f"Документ закодирован: {name} ({mime}, {document.size} байт, "
        f"{'текст' if not document.content.startswith(DATA_URL_PREFIX) else 'base64'})"
    )
    return document


def guess_mime_type(path: Path) -> str:
    """MIME тип по имени файла"""
    mime, _ = mimetypes.guess_type(path.name)
    return mime or DEFAULT_MIME_TYPE


def encode_file(path: Path, mime_type: Optional[str] = None) -> Optional[Document]:
    """
    Создание документа из файла на диске.

    Raises:
        OSError: файл не читается
    """
    path = Path(path)
    data = path.read_bytes()
    return encode_document(path.name, mime_type or guess_mime_type(path), data)


def decode_data_url(content: str) -> bytes:
    """
    Раскодирование строки data:<mime>;base64,<payload>.

    Raises:
        CodecError: нет префикса data:, нет запятой-разделителя,
            нет маркера base64 или повреждён base64
    """
    if not content.startswith(DATA_URL_PREFIX):
        raise CodecError("Contenu du document corrompu: en-tête data: attendu")

    header, separator, payload = content.partition(",")
    if not separator:
        raise CodecError("Contenu du document corrompu: en-tête data: sans séparateur")
    if not header.endswith(BASE64_MARKER):
        raise CodecError("Contenu du document corrompu: en-tête data: sans base64")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f"Contenu du document corrompu: base64 invalide ({e})") from e


def decode_document(document: Document) -> DecodedBlob:
    """
    Восстановление файла для скачивания.

    Текстовый документ, чьё содержимое не является корректной
    строкой data:...;base64, отдаётся как есть в UTF-8 (текст вида
    "data: 12, 14" остаётся текстом).

    Raises:
        CodecError: нет содержимого, повреждён base64 или у бинарного
            документа нет заголовка data:
    """
    content = document.content
    if not content:
        raise CodecError(f"Le document '{document.name}' n'a pas de contenu")

    mime = document.mime_type or DEFAULT_MIME_TYPE
    if is_text_type(mime, document.name):
        try:
            data = decode_data_url(content)
        except CodecError:
            data = content.encode("utf-8")
    elif content.startswith(DATA_URL_PREFIX):
        data = decode_data_url(content)
    else:
        raise CodecError(
            f"Contenu du document '{document.name}' corrompu: en-tête binaire attendu pour {mime}"
        )

    return DecodedBlob(name=document.name, mime_type=mime, data=data)


def _available_path(directory: Path, file_name: str) -> Path:
    """Свободное имя в каталоге: 'a.pdf', 'a (1).pdf', 'a (2).pdf', ..."""
    candidate = directory / file_name
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def write_blob(blob: DecodedBlob, directory: Path) -> Path:
    """
    Сохранение файла в каталог без частичных файлов при сбое.

    Имя очищается от компонентов пути, занятые имена получают суффикс (n).

    Raises:
        OSError: каталог недоступен или нет места
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    safe_name = Path(blob.name.replace("\\", "/")).name
    if safe_name in ("", ".", ".."):
        safe_name = "document"
    target = _available_path(directory, safe_name)

    fd, tmp_path = tempfile.mkstemp(prefix=".download-", suffix=".part", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(blob.data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_error:
            logger.debug(f"Не удалось удалить временный файл {tmp_path}: {cleanup_error}")
        raise

    logger.info(f"Документ сохранён: {target} ({len(blob.data)} байт)")
    return target
