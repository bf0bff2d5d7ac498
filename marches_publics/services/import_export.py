"""
MODULE: marches_publics.services.import_export
RESPONSIBILITY: Export the collection to a dated JSON file and parse import files.
ALLOWED: json, pathlib, core.models, services.validation, loguru.
FORBIDDEN: Storage access, merge decisions.
ERRORS: ParseError (import file is not JSON or not an array), OSError (export target).

Экспорт и импорт коллекции.

Формат файла: UTF-8 JSON, массив объектов контрактов с исходными
именами полей. Экспорт - с отступом 2, имя marches_publics_<YYYY-MM-DD>.json.
Импорт: неверный JSON или не-массив -> ParseError целиком, без частичного
эффекта; элементы массива проходят services.validation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence, Union

from loguru import logger

from marches_publics.core.models import ContractRecord
from marches_publics.errors import ParseError
from marches_publics.services.validation import ImportBatch, validate_batch
from marches_publics.utils.clock import today_iso

EXPORT_FILE_PREFIX = "marches_publics_"


def export_file_name(date_iso: Optional[str] = None) -> str:
    """Имя файла экспорта с календарной датой"""
    return f"{EXPORT_FILE_PREFIX}{date_iso or today_iso()}.json"


def serialize_collection(records: Sequence[ContractRecord]) -> str:
    """Коллекция в виде отформатированного JSON"""
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2)


def export_collection(
    records: Sequence[ContractRecord],
    target_dir: Path,
    date_iso: Optional[str] = None,
) -> Path:
    """
    Запись всей коллекции в файл экспорта.

    Args:
        records: Коллекция
        target_dir: Каталог назначения (создаётся при необходимости)
        date_iso: Дата для имени файла (по умолчанию сегодня)

    Returns:
        Путь к созданному файлу

    Raises:
        OSError: каталог недоступен
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_file_name(date_iso)
    path.write_text(serialize_collection(records), encoding="utf-8")
    logger.info(f"Экспорт выполнен: {len(records)} записей -> {path}")
    return path


def parse_import_text(text: Union[str, bytes], strict: bool = False) -> ImportBatch:
    """
    Разбор содержимого файла импорта.

    Raises:
        ParseError: не JSON или верхний уровень не массив
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError("Erreur lors de la lecture du fichier") from e

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Файл импорта не является JSON: {e}")
        raise ParseError("Erreur lors de la lecture du fichier") from e

    if not isinstance(payload, list):
        logger.warning(f"Файл импорта содержит {type(payload).__name__} вместо массива")
        raise ParseError("Format de fichier invalide")

    batch = validate_batch(payload, strict=strict)
    logger.info(f"Файл импорта разобран: {len(batch.accepted)} из {batch.total} записей приняты")
    return batch


def read_import_file(path: Path, strict: bool = False) -> ImportBatch:
    """
    Чтение и разбор файла импорта.

    Raises:
        ParseError: файл не читается, не JSON или не массив
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.error(f"Не удалось прочитать файл импорта {path}: {e}")
        raise ParseError(f"Erreur lors de la lecture du fichier: {e}") from e
    return parse_import_text(raw, strict=strict)
