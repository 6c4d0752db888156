"""
Модуль views.py
Фильтрация закладок для отображения: корзина, папки и поиск.
"""

from typing import List, Sequence

from .models import TRASH_FOLDER_ID, UNCATEGORIZED_FOLDER_ID, Bookmark


def matches_search(bookmark: Bookmark, query: str) -> bool:
    """
    Проверяет, содержит ли закладка строку поиска (без учета регистра).
    Поиск идет по заголовку, адресу, описанию и тегам.

    Аргументы:
        bookmark: Проверяемая закладка
        query: Строка поиска

    Возвращает:
        bool: True, если хотя бы одно поле содержит строку
    """
    needle = query.lower()
    return (
        needle in bookmark.title.lower()
        or needle in bookmark.url.lower()
        or needle in (bookmark.description or "").lower()
        or any(needle in tag.lower() for tag in bookmark.tags)
    )


def filter_bookmarks(
    bookmarks: Sequence[Bookmark],
    selected_folder_ids: Sequence[str],
    search_query: str = "",
) -> List[Bookmark]:
    """
    Строит список закладок для отображения.

    Удаленные закладки видны только в псевдо-папке корзины; остальные
    выбранные папки при этом игнорируются. Несколько выбранных папок
    объединяются (ИЛИ). Поиск сужает результат фильтра папок (И).
    Порядок результата совпадает с порядком исходной коллекции.

    Аргументы:
        bookmarks: Полная коллекция закладок
        selected_folder_ids: Выбранные папки и псевдо-папки
        search_query: Строка поиска

    Возвращает:
        List[Bookmark]: Отфильтрованные закладки
    """
    selected = set(selected_folder_ids)

    if TRASH_FOLDER_ID in selected:
        result = [b for b in bookmarks if b.deleted]
    else:
        result = [b for b in bookmarks if not b.deleted]
        if selected:
            include_uncategorized = UNCATEGORIZED_FOLDER_ID in selected
            result = [
                b for b in result
                if (include_uncategorized and not b.folder_id)
                or (b.folder_id and b.folder_id in selected)
            ]

    if search_query.strip():
        result = [b for b in result if matches_search(b, search_query)]

    return result
