"""
Marchés Publics: локальный каталог контрактов публичных закупок
с документами и заметками.
"""

__version__ = "1.0.0"
