"""
Форматирование значений для вывода пользователю.
"""

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    """
    Человекочитаемый размер файла (основание 1024, до двух знаков).

    :param size: Размер в байтах
    :return: Строка вида '1.5 KB' или '0 Bytes'
    """
    if size <= 0:
        return "0 Bytes"
    index = 0
    while index < len(_SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    value = round(size / (1024 ** index), 2)
    # 1.50 -> 1.5, 2.00 -> 2
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def format_amount(amount: float) -> str:
    """Сумма в евро с разделителем тысяч (пробел), например '150 000 €'"""
    if float(amount).is_integer():
        text = f"{int(amount):,}"
    else:
        text = f"{amount:,.2f}"
    return text.replace(",", " ").replace(".", ",") + " €"
