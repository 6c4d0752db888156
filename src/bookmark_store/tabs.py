"""
Модуль tabs.py
Учет вкладок встроенного браузера в пределах одной сессии.
Вкладки не сохраняются на диск.
"""

from typing import Callable, List, Optional

from .logger import get_logger, log_function_call
from .models import BrowserTab
from .utils import DateUtils, IdUtils

logger = get_logger(__name__)


class TabSession:
    """
    Набор открытых вкладок и ссылка на активную.

    Если существует хотя бы одна вкладка, последнюю закрыть нельзя.
    """

    def __init__(
        self,
        id_factory: Callable[[], str] = IdUtils.new_id,
        clock: Callable[[], str] = DateUtils.now_iso,
    ):
        """
        Инициализация сессии.

        Аргументы:
            id_factory: Генератор идентификаторов вкладок
            clock: Источник текущего времени в ISO формате
        """
        self._id_factory = id_factory
        self._clock = clock
        self.tabs: List[BrowserTab] = []
        self.active_tab_id: Optional[str] = None

    @property
    def active_tab(self) -> Optional[BrowserTab]:
        return self._find(self.active_tab_id) if self.active_tab_id else None

    def _find(self, tab_id: str) -> Optional[BrowserTab]:
        return next((tab for tab in self.tabs if tab.id == tab_id), None)

    def _activate(self, tab: BrowserTab) -> None:
        tab.last_active_at = self._clock()
        self.active_tab_id = tab.id

    def create_or_activate_tab(self, url: str, title: Optional[str] = None) -> BrowserTab:
        """
        Открывает адрес во вкладке.

        Если вкладка с точно таким же адресом уже есть, она активируется
        (и получает новый заголовок, если он передан и не пустой).
        Иначе создается и активируется новая вкладка.

        Аргументы:
            url: Адрес страницы
            title: Заголовок страницы

        Возвращает:
            BrowserTab: Активированная вкладка
        """
        log_function_call("TabSession.create_or_activate_tab", (url,), {"title": title})

        tab = next((t for t in self.tabs if t.url == url), None)
        if tab is not None:
            if title and title.strip():
                tab.title = title
        else:
            now = self._clock()
            tab = BrowserTab(
                id=self._id_factory(),
                url=url,
                title=title,
                created_at=now,
                last_active_at=now,
            )
            self.tabs.append(tab)
            logger.debug(f"Открыта вкладка {tab.id}: {url}")

        self._activate(tab)
        return tab

    def activate_tab(self, tab_id: str) -> bool:
        """Делает вкладку активной. Неизвестный идентификатор игнорируется."""
        tab = self._find(tab_id)
        if tab is None:
            return False
        self._activate(tab)
        return True

    def close_tab(self, tab_id: str) -> bool:
        """
        Закрывает вкладку.

        Последняя вкладка не закрывается. Если закрыта активная вкладка,
        активной становится вкладка, занявшая ее позицию, или новая последняя.

        Аргументы:
            tab_id: Идентификатор вкладки

        Возвращает:
            bool: True, если вкладка закрыта
        """
        if len(self.tabs) <= 1:
            logger.debug("Последнюю вкладку закрыть нельзя")
            return False

        index = next((i for i, tab in enumerate(self.tabs) if tab.id == tab_id), None)
        if index is None:
            return False

        del self.tabs[index]
        if self.active_tab_id == tab_id:
            if self.tabs:
                self._activate(self.tabs[min(index, len(self.tabs) - 1)])
            else:
                self.active_tab_id = None
        return True
