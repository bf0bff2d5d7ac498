"""
Текущее время в формате хранилища (UTC ISO-8601, миллисекунды, суффикс Z).
"""

import re
from datetime import date, datetime, timezone

_CALENDAR_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def utc_now_iso() -> str:
    """Метка времени вида 2024-01-15T10:30:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    """Текущая календарная дата (UTC) в формате YYYY-MM-DD"""
    return datetime.now(timezone.utc).date().isoformat()


def parse_calendar_date(value: str) -> date:
    """
    Разбор даты YYYY-MM-DD (допускается полная ISO-метка, берётся дата).

    :raises ValueError: если строка не является датой
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("пустая дата")
    text = value.strip()
    day, separator, _ = text.partition("T")
    if not _CALENDAR_DATE.fullmatch(day):
        raise ValueError(f"неверная дата '{value}': ожидается YYYY-MM-DD")
    try:
        if separator:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(day)
    except ValueError as e:
        raise ValueError(f"неверная дата '{value}': {e}") from e
