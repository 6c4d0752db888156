"""
Пакет bookmark_store
Хранилище закладок и папок настольного приложения.
"""

__version__ = "0.1.0"
