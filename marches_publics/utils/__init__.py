"""
Утилиты проекта MarchesPublics.
"""
from .clock import utc_now_iso, today_iso, parse_calendar_date
from .formatting import format_file_size, format_amount
from .id_generator import generate_id

__all__ = [
    'utc_now_iso',
    'today_iso',
    'parse_calendar_date',
    'format_file_size',
    'format_amount',
    'generate_id',
]
