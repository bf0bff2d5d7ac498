"""
MODULE: marches_publics.utils.id_generator
RESPONSIBILITY: Generate short collision-resistant identifiers.
ALLOWED: time, secrets.
FORBIDDEN: Storage access.
ERRORS: None.

Генерация идентификаторов для записей, документов и заметок.

Идентификатор = время в миллисекундах (base36) + случайная часть (base36).
Уникальность гарантируется только в пределах одной сессии с очень
высокой вероятностью, это не криптографическая гарантия.
"""

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# 52 случайных бита, как у мантиссы Math.random()
RANDOM_BITS = 52


def to_base36(value: int) -> str:
    """Перевод неотрицательного целого в строку base36."""
    if value < 0:
        raise ValueError("to_base36 принимает только неотрицательные числа")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Новый идентификатор: временная часть + случайная часть."""
    time_part = to_base36(time.time_ns() // 1_000_000)
    random_part = to_base36(secrets.randbits(RANDOM_BITS))
    return time_part + random_part
