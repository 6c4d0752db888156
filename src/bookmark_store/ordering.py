"""
Модуль ordering.py
Алгоритмы ручного упорядочивания закладок и папок.
Функции чистые: принимают коллекцию и порядок идентификаторов, возвращают новый список.
"""

from collections import deque
from typing import Iterable, List, Optional, Protocol, Sequence, TypeVar


class HasId(Protocol):
    id: str


T = TypeVar("T", bound=HasId)


def _unique_ids(ordered_ids: Iterable[str]) -> List[str]:
    """Убирает повторы, сохраняя первое вхождение."""
    seen = set()
    result = []
    for item_id in ordered_ids:
        if item_id not in seen:
            seen.add(item_id)
            result.append(item_id)
    return result


def reorder_by_ids(items: Sequence[T], ordered_ids: Iterable[str]) -> List[T]:
    """
    Полное переупорядочивание коллекции по списку идентификаторов.

    Элементы из списка идут первыми в заданном порядке, неизвестные
    идентификаторы пропускаются. Элементы, которых нет в списке, добавляются
    в конец в исходном относительном порядке, поэтому ни один элемент не теряется.

    Аргументы:
        items: Исходная коллекция
        ordered_ids: Желаемый порядок идентификаторов

    Возвращает:
        List[T]: Переупорядоченная коллекция той же длины
    """
    by_id = {item.id: item for item in items}
    ordered = [by_id[item_id] for item_id in _unique_ids(ordered_ids) if item_id in by_id]
    placed = {item.id for item in ordered}
    remaining = [item for item in items if item.id not in placed]
    return ordered + remaining


def reconcile_order(items: Sequence[T], ordered_ids: Iterable[str]) -> Optional[List[T]]:
    """
    Переносит порядок видимого подмножества в полную коллекцию.

    Видимое подмножество (результат фильтра или поиска) переставляется
    внутри тех позиций, которые оно занимает в полной коллекции; все прочие
    элементы остаются на своих местах.

    Аргументы:
        items: Полная коллекция в текущем порядке
        ordered_ids: Новый порядок видимых элементов

    Возвращает:
        Optional[List[T]]: Новая коллекция или None, если менять нечего
        (меньше двух известных идентификаторов или порядок уже совпадает)
    """
    by_id = {item.id: item for item in items}
    target_order = [item_id for item_id in _unique_ids(ordered_ids) if item_id in by_id]
    if len(target_order) <= 1:
        return None

    target_set = set(target_order)
    current_order = [item.id for item in items if item.id in target_set]
    if current_order == target_order:
        return None

    queue = deque(by_id[item_id] for item_id in target_order)
    return [queue.popleft() if item.id in target_set else item for item in items]
