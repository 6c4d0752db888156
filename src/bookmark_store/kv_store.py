"""
Модуль kv_store.py
Долговременное хранилище «ключ-значение».
Ядро работает только через интерфейс KeyValueStore (get, set, save);
JsonFileStore хранит все ключи в одном JSON-файле.
"""

import asyncio
import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import aiofiles

from .logger import get_logger, log_function_call, log_performance

logger = get_logger(__name__)


class StoreError(Exception):
    """Базовая ошибка долговременного хранилища."""


class StoreFormatError(StoreError, ValueError):
    """Файл хранилища поврежден или имеет неверную структуру."""


class KeyValueStore(ABC):
    """
    Интерфейс долговременного хранилища.

    set изменяет только состояние в памяти; на носитель данные попадают
    после вызова save.
    """

    @abstractmethod
    async def get(self, key: str) -> Any:
        """Возвращает значение ключа или None, если его нет."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Устанавливает значение ключа."""

    @abstractmethod
    async def save(self) -> None:
        """Сбрасывает все значения на носитель."""


class JsonFileStore(KeyValueStore):
    """
    Хранилище в одном JSON-файле.

    Значения по умолчанию (схема) возвращаются для ключей, которые ни разу
    не записывались, но сами в файл не попадают, пока не будут установлены.
    """

    def __init__(
        self,
        path: Union[str, Path],
        defaults: Optional[Mapping[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        """
        Инициализация хранилища.

        Аргументы:
            path: Путь к JSON-файлу
            defaults: Значения по умолчанию для отсутствующих ключей
            data: Уже прочитанное содержимое файла
        """
        self.path = Path(path)
        self.defaults: Dict[str, Any] = dict(defaults or {})
        self._data: Dict[str, Any] = dict(data or {})
        self._save_lock: Optional[asyncio.Lock] = None

    @classmethod
    async def load(
        cls, path: Union[str, Path], defaults: Optional[Mapping[str, Any]] = None
    ) -> 'JsonFileStore':
        """
        Открывает хранилище, читая файл, если он существует.

        Аргументы:
            path: Путь к JSON-файлу
            defaults: Схема значений по умолчанию

        Возвращает:
            JsonFileStore: Открытое хранилище

        Raises:
            StoreFormatError: Если содержимое файла не является JSON-объектом
            OSError: При ошибке чтения файла
        """
        start_time = time.time()
        log_function_call("JsonFileStore.load", (str(path),))

        path = Path(path)
        if not path.exists():
            logger.info(f"Файл хранилища не найден, будет создан при сохранении: {path}")
            return cls(path, defaults)

        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()

        try:
            data = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            raise StoreFormatError(f"Некорректный JSON в файле хранилища {path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreFormatError(
                f"Ожидался JSON-объект в файле хранилища {path}, получен {type(data).__name__}"
            )

        log_performance("JsonFileStore.load", time.time() - start_time, f"keys={len(data)}")
        return cls(path, defaults, data)

    async def get(self, key: str) -> Any:
        if key in self._data:
            return self._data[key]
        return self.defaults.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def save(self) -> None:
        """
        Атомарно записывает содержимое через временный файл.

        Raises:
            OSError: При ошибке записи
            TypeError: Если значение не сериализуется в JSON
        """
        start_time = time.time()

        # Записи в общий временный файл не должны перемежаться
        if self._save_lock is None:
            self._save_lock = asyncio.Lock()

        async with self._save_lock:
            payload = json.dumps(self._data, indent=2, ensure_ascii=False)

            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
            async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                await f.write(payload)
            temp_file.replace(self.path)

        duration = time.time() - start_time
        logger.debug(f"Хранилище сохранено: {self.path} ({len(payload)} байт, {duration:.3f}с)")
