"""
Модуль preferences.py
Настройки интерфейса, которые сохраняются при каждом изменении.
Каждая настройка - наблюдаемое поле с функцией валидации: значение
проверяется (и при необходимости ограничивается) и при загрузке, и при записи.
"""

import copy
from functools import partial
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .logger import get_logger
from .models import VIEW_MODES, ViewMode
from .utils import ValidationUtils

logger = get_logger(__name__)

T = TypeVar("T")

Validator = Callable[[Any], Optional[Any]]
Listener = Callable[[str, Any], None]

SIDEBAR_WIDTH_RANGE = (200, 400)
TOOLBAR_AUTO_HIDE_RANGE = (0, 5000)
TOOLBAR_HOTZONE_DELAY_RANGE = (0, 1000)


def validate_folder_ids(value: Any) -> Optional[List[str]]:
    """Список идентификаторов папок без повторов или None."""
    if not ValidationUtils.is_string_list(value):
        return None
    return list(dict.fromkeys(value))


def validate_search_query(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def validate_view_mode(value: Any) -> Optional[ViewMode]:
    return value if value in VIEW_MODES else None


def validate_theme(value: Any) -> Optional[str]:
    """Тема без пробелов по краям; пустая строка отклоняется."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


validate_sidebar_width = partial(
    ValidationUtils.clamp_int, minimum=SIDEBAR_WIDTH_RANGE[0], maximum=SIDEBAR_WIDTH_RANGE[1]
)
validate_toolbar_auto_hide_ms = partial(
    ValidationUtils.clamp_int, minimum=TOOLBAR_AUTO_HIDE_RANGE[0], maximum=TOOLBAR_AUTO_HIDE_RANGE[1]
)
validate_toolbar_hotzone_delay_ms = partial(
    ValidationUtils.clamp_int, minimum=TOOLBAR_HOTZONE_DELAY_RANGE[0], maximum=TOOLBAR_HOTZONE_DELAY_RANGE[1]
)


class Preference(Generic[T]):
    """
    Наблюдаемое поле настройки.

    Значение меняется только через set (с уведомлением подписчиков) или
    load (без уведомления, для начальной загрузки из хранилища).
    Подписчики получают ключ хранилища и новое значение.
    """

    def __init__(self, key: str, default: T, validator: Validator):
        """
        Инициализация настройки.

        Аргументы:
            key: Ключ в долговременном хранилище
            default: Значение по умолчанию
            validator: Возвращает допустимое значение или None, если значение отклонено
        """
        self.key = key
        self.default = default
        self._validator = validator
        self._value: T = copy.deepcopy(default)
        self._listeners: List[Listener] = []

    @property
    def value(self) -> T:
        # Копия, чтобы изменения списка не обходили уведомление
        return copy.copy(self._value)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def accepts(self, value: Any) -> bool:
        return self._validator(value) is not None

    def set(self, value: Any, notify: bool = True) -> bool:
        """
        Устанавливает новое значение и уведомляет подписчиков.

        Аргументы:
            value: Новое значение
            notify: Уведомлять ли подписчиков об изменении

        Возвращает:
            bool: True, если значение изменилось
        """
        accepted = self._validator(value)
        if accepted is None:
            logger.warning(f"Отклонено недопустимое значение настройки {self.key}: {value!r}")
            return False
        if accepted == self._value:
            return False

        self._value = accepted
        if notify:
            for listener in self._listeners:
                listener(self.key, self.value)
        return True

    def load(self, raw: Any) -> bool:
        """
        Принимает значение, прочитанное из хранилища, без уведомления.

        Возвращает:
            bool: True, если значение принято
        """
        accepted = self._validator(raw)
        if accepted is None:
            if raw is not None:
                logger.warning(f"Игнорируется сохраненное значение {self.key}: {raw!r}")
            return False
        self._value = accepted
        return True


def create_preferences() -> Dict[str, Preference]:
    """
    Создает набор настроек интерфейса со значениями по умолчанию.

    Возвращает:
        Dict[str, Preference]: Настройки по имени атрибута хранилища
    """
    return {
        "selected_folder_ids": Preference("ui.selectedFolderIds", [], validate_folder_ids),
        "search_query": Preference("ui.searchQuery", "", validate_search_query),
        "view_mode": Preference("ui.viewMode", "grid", validate_view_mode),
        "sidebar_width": Preference("ui.sidebarWidth", 256, validate_sidebar_width),
        "theme": Preference("ui.theme", "system", validate_theme),
        "toolbar_auto_hide_ms": Preference(
            "ui.browserToolbarAutoHideMs", 800, validate_toolbar_auto_hide_ms
        ),
        "toolbar_hotzone_reveal_delay_ms": Preference(
            "ui.browserToolbarHotzoneRevealDelayMs", 220, validate_toolbar_hotzone_delay_ms
        ),
    }


def default_schema() -> Dict[str, Any]:
    """
    Схема значений по умолчанию для открытия хранилища.
    Ключи коллекций не объявлены: их отсутствие означает первый запуск.
    """
    return {pref.key: copy.deepcopy(pref.default) for pref in create_preferences().values()}
