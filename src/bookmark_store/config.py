"""
Модуль config.py
Управляет конфигурацией хранилища закладок через .env-файл.
Обеспечивает валидацию и доступ к параметрам конфигурации.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_STORE_PATH = "bookmarks.json"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """
    Класс конфигурации хранилища.
    Все поля загружаются из .env-файла или переменных окружения.
    """

    # Путь к файлу хранилища
    store_path: str

    # Настройки логирования
    log_level: str
    log_file: str


class ConfigManager:
    """
    Менеджер конфигурации хранилища.
    Загружает параметры из .env-файла и предоставляет валидацию.
    """

    def __init__(self, env_path: Optional[str] = None):
        """
        Инициализация менеджера конфигурации.

        Аргументы:
            env_path: Путь к .env-файлу (по умолчанию .env в текущей директории)
        """
        logger.debug(f"Инициализация ConfigManager с env_path: {env_path}")

        load_dotenv(env_path or ".env", override=True)
        self.config = self._load_config()
        self._validate_config()

        logger.debug(
            f"Загружена конфигурация: store_path={self.config.store_path}, "
            f"log_level={self.config.log_level}"
        )

    def _load_config(self) -> Config:
        """
        Загружает конфигурацию из переменных окружения.

        Возвращает:
            Config: Объект с загруженной конфигурацией
        """
        return Config(
            store_path=os.getenv("STORE_PATH", DEFAULT_STORE_PATH),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "./bookmark_store.log"),
        )

    def _validate_config(self) -> None:
        """
        Валидирует параметры конфигурации.

        Raises:
            ValueError: Если найдены некорректные параметры
        """
        validation_errors = []

        if not self.config.store_path.strip():
            error_msg = "STORE_PATH не может быть пустым"
            validation_errors.append(error_msg)
            logger.error(error_msg)

        if self.config.log_level.upper() not in VALID_LOG_LEVELS:
            error_msg = f"Неизвестный LOG_LEVEL: {self.config.log_level}"
            validation_errors.append(error_msg)
            logger.error(error_msg)

        if validation_errors:
            raise ValueError(
                f"Ошибки валидации конфигурации: {'; '.join(validation_errors)}"
            )

        logger.debug("Валидация конфигурации успешно пройдена")

    def get(self) -> Config:
        """Возвращает объект конфигурации."""
        return self.config
