"""
Общие фикстуры для тестов хранилища закладок.
Содержит фабрики тестовых данных и хранилище с детерминированными идентификаторами.
"""
import itertools
import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from bookmark_store.kv_store import KeyValueStore
from bookmark_store.models import Bookmark
from bookmark_store.store import BookmarkStore

FIXED_NOW = "2024-05-01T12:00:00+00:00"
FIXED_TODAY = "2024-05-01"


class MemoryStore(KeyValueStore):
    """Хранилище в памяти для тестов; умеет имитировать ошибку записи."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, fail_on_save: bool = False):
        self.data: Dict[str, Any] = dict(data or {})
        self.defaults: Dict[str, Any] = {}
        self.fail_on_save = fail_on_save
        self.save_count = 0

    async def get(self, key: str) -> Any:
        if key in self.data:
            return self.data[key]
        return self.defaults.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    async def save(self) -> None:
        if self.fail_on_save:
            raise OSError("диск недоступен")
        self.save_count += 1


def memory_opener(kv: MemoryStore):
    """Возвращает функцию открытия, отдающую заранее созданное хранилище."""
    async def opener(path, defaults):
        kv.defaults = dict(defaults)
        return kv
    return opener


@pytest.fixture
def temp_dir():
    """Создает временную директорию для тестов."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def store_path(temp_dir):
    """Путь к файлу хранилища во временной директории."""
    return str(temp_dir / "bookmarks.json")


@pytest.fixture
def id_factory():
    """Генератор идентификаторов id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def store(store_path, id_factory):
    """Хранилище с фиксированными временем и датой."""
    return BookmarkStore(
        store_path,
        id_factory=id_factory,
        clock=lambda: FIXED_NOW,
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture
def make_bookmark():
    """Фабрика тестовых закладок."""
    def factory(
        bookmark_id="b1",
        title="Test Bookmark",
        url="https://example.com",
        folder_id=None,
        tags=None,
        description="",
        deleted=False,
    ):
        return Bookmark(
            id=bookmark_id,
            title=title,
            url=url,
            description=description,
            tags=tags or [],
            folder_id=folder_id,
            date=FIXED_TODAY,
            deleted=deleted,
            deleted_at=FIXED_NOW if deleted else None,
        )
    return factory


@pytest.fixture
def restore_root_logging():
    """Возвращает корневой логгер в исходное состояние после теста."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def read_store_file(path) -> Dict[str, Any]:
    """Читает JSON-файл хранилища."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)
