"""
Модуль store.py
Хранилище закладок: коллекции закладок и папок в памяти, синхронизация
с долговременным хранилищем и производное представление для отображения.

Каждая операция изменения сначала меняет состояние в памяти, затем
записывает обе коллекции целиком. Ошибки записи логируются и не
передаются вызывающему коду: изменение в памяти уже выполнено.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Set

from pydantic import TypeAdapter

from .config import DEFAULT_STORE_PATH
from .kv_store import JsonFileStore, KeyValueStore, StoreError
from .logger import get_logger, log_error_with_context, log_function_call, log_performance
from .models import Bookmark, Folder, ViewMode, seed_folders
from .ordering import reconcile_order, reorder_by_ids
from .preferences import Preference, create_preferences, default_schema
from .tabs import TabSession
from .utils import DateUtils, IdUtils
from .views import filter_bookmarks

logger = get_logger(__name__)

BOOKMARKS_KEY = "bookmarks"
FOLDERS_KEY = "folders"

# Поля, которые update_bookmark не меняет
IMMUTABLE_BOOKMARK_FIELDS = frozenset({"id", "date"})

Opener = Callable[[str, Mapping[str, Any]], Awaitable[KeyValueStore]]

_bookmark_list = TypeAdapter(List[Bookmark])
_folder_list = TypeAdapter(List[Folder])


class _PreferenceAttribute:
    """Атрибут хранилища, читающий и записывающий настройку интерфейса."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional['BookmarkStore'], owner: type) -> Any:
        if instance is None:
            return self
        return instance.preference(self.name).value

    def __set__(self, instance: 'BookmarkStore', value: Any) -> None:
        instance.preference(self.name).set(value)


class BookmarkStore:
    """
    Хранилище закладок и папок приложения.

    Коллекции bookmarks и folders принадлежат хранилищу; изменять их
    следует только через методы этого класса.
    """

    selected_folder_ids = _PreferenceAttribute()
    search_query = _PreferenceAttribute()
    view_mode = _PreferenceAttribute()
    sidebar_width = _PreferenceAttribute()
    theme = _PreferenceAttribute()
    toolbar_auto_hide_ms = _PreferenceAttribute()
    toolbar_hotzone_reveal_delay_ms = _PreferenceAttribute()

    def __init__(
        self,
        store_path: str = DEFAULT_STORE_PATH,
        opener: Opener = JsonFileStore.load,
        id_factory: Callable[[], str] = IdUtils.new_id,
        clock: Callable[[], str] = DateUtils.now_iso,
        today: Callable[[], str] = DateUtils.today_iso,
    ):
        """
        Инициализация хранилища. Чтение с диска выполняется в init().

        Аргументы:
            store_path: Путь к файлу долговременного хранилища
            opener: Функция открытия хранилища «ключ-значение»
            id_factory: Генератор уникальных идентификаторов
            clock: Источник текущего времени (ISO)
            today: Источник текущей даты (YYYY-MM-DD)
        """
        self.store_path = store_path
        self._opener = opener
        self._id_factory = id_factory
        self._clock = clock
        self._today = today

        self.bookmarks: List[Bookmark] = []
        self.folders: List[Folder] = seed_folders()
        self.current_folder_id: Optional[str] = None
        self.is_loaded = False
        self.tabs = TabSession(id_factory, clock)

        self._kv: Optional[KeyValueStore] = None
        self._pending_writes: Set[asyncio.Task] = set()
        self._preferences: Dict[str, Preference] = create_preferences()
        for pref in self._preferences.values():
            pref.subscribe(self._on_preference_change)

    def preference(self, name: str) -> Preference:
        return self._preferences[name]

    # --- Жизненный цикл ---

    async def init(self) -> bool:
        """
        Загружает состояние из долговременного хранилища.

        Повторный вызов после успешной загрузки ничего не делает. При любой
        ошибке хранилище работает только в памяти до конца сессии, а
        исключение логируется.

        Возвращает:
            bool: True, если состояние загружено
        """
        if self.is_loaded:
            return True

        start_time = time.time()
        log_function_call("BookmarkStore.init", (self.store_path,))

        try:
            self._kv = await self._opener(self.store_path, default_schema())

            stored_bookmarks = await self._kv.get(BOOKMARKS_KEY)
            if stored_bookmarks is not None:
                self.bookmarks = _bookmark_list.validate_python(stored_bookmarks)
            else:
                self.bookmarks = []
                await self._write_collections()

            stored_folders = await self._kv.get(FOLDERS_KEY)
            if stored_folders is not None:
                self.folders = _folder_list.validate_python(stored_folders)
            else:
                await self._kv.set(FOLDERS_KEY, self._dump(self.folders))
                await self._kv.save()

            for pref in self._preferences.values():
                pref.load(await self._kv.get(pref.key))

            self.is_loaded = True

        except Exception as e:
            # Не пишем поверх данных, которые не удалось прочитать
            self._kv = None
            log_error_with_context(
                e, {"operation": "init", "store_path": self.store_path}
            )
            logger.warning("Хранилище работает только в памяти до конца сессии")
            return False

        log_performance(
            "BookmarkStore.init",
            time.time() - start_time,
            f"bookmarks={len(self.bookmarks)}, folders={len(self.folders)}",
        )
        return True

    @staticmethod
    def _dump(records: Iterable[Any]) -> List[Dict[str, Any]]:
        return [record.to_storage() for record in records]

    async def _write_collections(self) -> None:
        if self._kv is None:
            raise StoreError("Долговременное хранилище не открыто")
        await self._kv.set(BOOKMARKS_KEY, self._dump(self.bookmarks))
        await self._kv.set(FOLDERS_KEY, self._dump(self.folders))
        await self._kv.save()

    async def save(self) -> bool:
        """
        Записывает обе коллекции целиком.

        Возвращает:
            bool: True при успешной записи; False, если хранилище не открыто
            или запись завершилась ошибкой (ошибка логируется)
        """
        if self._kv is None:
            logger.debug("Долговременное хранилище не открыто, запись пропущена")
            return False

        start_time = time.time()
        try:
            await self._write_collections()
        except Exception as e:
            log_error_with_context(
                e,
                {
                    "operation": "save",
                    "store_path": self.store_path,
                    "bookmarks": len(self.bookmarks),
                    "folders": len(self.folders),
                },
            )
            return False

        logger.debug(
            f"Коллекции сохранены за {time.time() - start_time:.3f}с: "
            f"{len(self.bookmarks)} закладок, {len(self.folders)} папок"
        )
        return True

    async def save_now(self) -> bool:
        return await self.save()

    # --- Настройки интерфейса ---

    def _on_preference_change(self, key: str, value: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"Нет запущенного цикла событий, настройка {key} не сохранена")
            return

        task = loop.create_task(self._write_preference(key, value))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_preference(self, key: str, value: Any) -> bool:
        if self._kv is None:
            return False
        try:
            await self._kv.set(key, value)
            await self._kv.save()
        except Exception as e:
            log_error_with_context(e, {"operation": "save_preference", "key": key})
            return False
        logger.debug(f"Настройка сохранена: {key}={value!r}")
        return True

    async def drain(self) -> None:
        """Ожидает завершения всех запланированных записей настроек."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def set_view_mode(self, mode: ViewMode) -> bool:
        """
        Устанавливает режим отображения и сразу сохраняет его.

        Аргументы:
            mode: "grid" или "list"

        Возвращает:
            bool: True, если режим принят и записан
        """
        pref = self.preference("view_mode")
        if not pref.accepts(mode):
            logger.warning(f"Неизвестный режим отображения: {mode!r}")
            return False
        pref.set(mode, notify=False)
        return await self._write_preference(pref.key, pref.value)

    def set_folder_filter(self, folder_id: Optional[str]) -> None:
        """Выбирает одну папку или, при None, снимает фильтр."""
        self.selected_folder_ids = [] if folder_id is None else [folder_id]

    def toggle_folder_filter(self, folder_id: str) -> None:
        """Добавляет папку к фильтру или убирает ее оттуда."""
        selected = self.selected_folder_ids
        if folder_id in selected:
            selected.remove(folder_id)
        else:
            selected.append(folder_id)
        self.selected_folder_ids = selected

    @property
    def filtered_bookmarks(self) -> List[Bookmark]:
        """Закладки для отображения с учетом фильтра папок, корзины и поиска."""
        return filter_bookmarks(self.bookmarks, self.selected_folder_ids, self.search_query)

    # --- Закладки ---

    def _bookmark_index(self, bookmark_id: str) -> Optional[int]:
        return next(
            (i for i, b in enumerate(self.bookmarks) if b.id == bookmark_id), None
        )

    def get_bookmark(self, bookmark_id: str) -> Optional[Bookmark]:
        index = self._bookmark_index(bookmark_id)
        return self.bookmarks[index] if index is not None else None

    async def add_bookmark(
        self,
        title: str,
        url: str,
        description: str = "",
        tags: Iterable[str] = (),
        folder_id: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Bookmark:
        """
        Добавляет закладку в начало коллекции.
        Дубликаты не проверяются.

        Аргументы:
            title: Заголовок
            url: Адрес
            description: Описание
            tags: Теги
            folder_id: Папка; None - без папки
            icon: Иконка

        Возвращает:
            Bookmark: Созданная закладка
        """
        log_function_call("BookmarkStore.add_bookmark", (title,), {"url": url})

        bookmark = Bookmark(
            id=self._id_factory(),
            title=title,
            url=url,
            description=description,
            tags=list(tags),
            folder_id=folder_id,
            date=self._today(),
            icon=icon,
        )
        self.bookmarks.insert(0, bookmark)
        logger.info(f"Добавлена закладка {bookmark.id}: {url}")

        await self.save()
        return bookmark

    async def update_bookmark(self, bookmark_id: str, **changes: Any) -> bool:
        """
        Обновляет указанные поля закладки, остальные сохраняются.
        Идентификатор и дата создания не меняются.

        Аргументы:
            bookmark_id: Идентификатор закладки
            **changes: Новые значения полей (title, url, folder_id, tags и т.д.)

        Возвращает:
            bool: True, если закладка найдена и обновлена

        Raises:
            pydantic.ValidationError: Если значения полей имеют неверный тип
        """
        log_function_call("BookmarkStore.update_bookmark", (bookmark_id,), changes)

        index = self._bookmark_index(bookmark_id)
        if index is None:
            logger.debug(f"Закладка для обновления не найдена: {bookmark_id}")
            return False

        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_BOOKMARK_FIELDS}
        merged = Bookmark.model_validate({**self.bookmarks[index].model_dump(), **changes})

        # deleted_at задан тогда и только тогда, когда deleted
        if merged.deleted and not merged.deleted_at:
            merged.deleted_at = self._clock()
        elif not merged.deleted and merged.deleted_at:
            merged.deleted_at = None

        self.bookmarks[index] = merged
        await self.save()
        return True

    async def remove_bookmark(self, bookmark_id: str) -> bool:
        """
        Перемещает закладку в корзину (мягкое удаление).

        Возвращает:
            bool: True, если закладка найдена
        """
        log_function_call("BookmarkStore.remove_bookmark", (bookmark_id,))

        index = self._bookmark_index(bookmark_id)
        if index is None:
            return False

        self.bookmarks[index] = self.bookmarks[index].model_copy(
            update={"deleted": True, "deleted_at": self._clock()}
        )
        logger.info(f"Закладка перемещена в корзину: {bookmark_id}")
        await self.save()
        return True

    async def restore_bookmark(self, bookmark_id: str) -> bool:
        """
        Восстанавливает закладку из корзины.

        Возвращает:
            bool: True, если закладка найдена
        """
        log_function_call("BookmarkStore.restore_bookmark", (bookmark_id,))

        index = self._bookmark_index(bookmark_id)
        if index is None:
            return False

        self.bookmarks[index] = self.bookmarks[index].model_copy(
            update={"deleted": False, "deleted_at": None}
        )
        logger.info(f"Закладка восстановлена: {bookmark_id}")
        await self.save()
        return True

    async def remove_bookmark_permanent(self, bookmark_id: str) -> bool:
        """
        Удаляет закладку безвозвратно. Отсутствующий идентификатор не является ошибкой.

        Возвращает:
            bool: True, если закладка была удалена
        """
        log_function_call("BookmarkStore.remove_bookmark_permanent", (bookmark_id,))

        before = len(self.bookmarks)
        self.bookmarks = [b for b in self.bookmarks if b.id != bookmark_id]
        removed = len(self.bookmarks) != before
        if removed:
            logger.info(f"Закладка удалена безвозвратно: {bookmark_id}")

        await self.save()
        return removed

    async def empty_trash(self) -> int:
        """
        Безвозвратно удаляет все закладки из корзины.

        Возвращает:
            int: Количество удаленных закладок
        """
        before = len(self.bookmarks)
        self.bookmarks = [b for b in self.bookmarks if not b.deleted]
        removed = before - len(self.bookmarks)
        logger.info(f"Корзина очищена: удалено {removed} закладок")

        await self.save()
        return removed

    async def reorder_bookmarks(self, visible_ordered_ids: List[str]) -> bool:
        """
        Применяет новый порядок видимых закладок к полной коллекции.

        Переставляются только закладки из списка, причем внутри позиций,
        которые они уже занимают; остальные закладки не сдвигаются.

        Аргументы:
            visible_ordered_ids: Идентификаторы видимых закладок в новом порядке

        Возвращает:
            bool: True, если порядок изменился и был сохранен
        """
        log_function_call("BookmarkStore.reorder_bookmarks", (len(visible_ordered_ids),))

        reordered = reconcile_order(self.bookmarks, visible_ordered_ids)
        if reordered is None:
            return False

        self.bookmarks = reordered
        await self.save()
        return True

    # --- Папки ---

    def _find_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)

    async def add_folder(self, name: str) -> str:
        """
        Добавляет папку в конец списка.

        Возвращает:
            str: Идентификатор новой папки
        """
        log_function_call("BookmarkStore.add_folder", (name,))

        folder = Folder(id=self._id_factory(), name=name)
        self.folders.append(folder)
        logger.info(f"Добавлена папка {folder.id}: {name}")

        await self.save()
        return folder.id

    async def remove_folder(self, folder_id: str) -> bool:
        """
        Удаляет папку. Ее закладки не удаляются, а становятся закладками без папки.

        Аргументы:
            folder_id: Идентификатор папки

        Возвращает:
            bool: True, если папка существовала
        """
        log_function_call("BookmarkStore.remove_folder", (folder_id,))

        moved = 0
        for bookmark in self.bookmarks:
            if bookmark.folder_id == folder_id:
                bookmark.folder_id = None
                moved += 1

        before = len(self.folders)
        self.folders = [f for f in self.folders if f.id != folder_id]
        removed = len(self.folders) != before

        if self.current_folder_id == folder_id:
            self.current_folder_id = None

        logger.info(f"Папка удалена: {folder_id}, закладок без папки: {moved}")
        await self.save()
        return removed

    async def update_folder(self, folder_id: str, name: str) -> bool:
        """Переименовывает папку. Возвращает False, если папка не найдена."""
        folder = self._find_folder(folder_id)
        if folder is None:
            return False

        folder.name = name
        await self.save()
        return True

    async def reorder_folders(self, new_order_ids: List[str]) -> None:
        """
        Упорядочивает папки по списку идентификаторов.
        Папки, отсутствующие в списке, сохраняются в конце.
        """
        log_function_call("BookmarkStore.reorder_folders", (new_order_ids,))

        self.folders = reorder_by_ids(self.folders, new_order_ids)
        await self.save()
