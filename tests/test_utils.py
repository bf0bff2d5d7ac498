"""
Тесты утилит: идентификаторы, форматирование, даты.
"""

import re

import pytest

from marches_publics.utils.clock import parse_calendar_date, today_iso, utc_now_iso
from marches_publics.utils.formatting import format_amount, format_file_size
from marches_publics.utils.id_generator import generate_id, to_base36


# =============================================================================
# Идентификаторы
# =============================================================================

@pytest.mark.parametrize("value, expected", [(0, "0"), (35, "z"), (36, "10"), (1295, "zz")])
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_generated_ids_are_lowercase_alphanumeric_and_distinct():
    ids = [generate_id() for _ in range(1000)]

    assert all(re.fullmatch(r"[0-9a-z]+", value) for value in ids)
    assert len(set(ids)) == len(ids)


# =============================================================================
# Форматирование
# =============================================================================

@pytest.mark.parametrize("size, expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (1048576, "1 MB"),
    (5 * 1024 ** 3, "5 GB"),
    (1234567, "1.18 MB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


@pytest.mark.parametrize("amount, expected", [
    (0, "0 €"),
    (150000, "150 000 €"),
    (1234.5, "1 234,50 €"),
])
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


# =============================================================================
# Даты
# =============================================================================

def test_timestamps_use_milliseconds_and_z_suffix():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now_iso())
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", today_iso())


def test_parse_calendar_date_accepts_date_and_full_timestamp():
    assert parse_calendar_date(" 2024-01-15 ").isoformat() == "2024-01-15"
    assert parse_calendar_date("2024-01-15T10:30:00.000Z").isoformat() == "2024-01-15"


@pytest.mark.parametrize("value", [
    "", "   ", "15/01/2024", "2024-13-01", "2024-01-15garbage", "20240115",
    "2024-01-15Tbientôt", "2024-1-15",
])
def test_parse_calendar_date_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_calendar_date(value)
