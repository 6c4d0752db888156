"""
Модуль logger.py
Логирование пакета: консоль и, если задан LOG_FILE, файл с ротацией.
Вспомогательные функции задают единый вид сообщений о вызовах операций,
их длительности и ошибках хранилища.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 10 МБ, 5 резервных копий
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5

logger = logging.getLogger(__name__)


def _parse_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


class LoggerManager:
    """
    Настройка корневого логгера процесса.

    Экземпляр один на процесс: все модули пакета пишут через корневой
    логгер, поэтому обработчики устанавливаются в одном месте.
    """

    _instance: Optional['LoggerManager'] = None

    def __new__(cls) -> 'LoggerManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def setup_logging(self, config: 'Config') -> None:
        """
        Заменяет обработчики корневого логгера.

        Аргументы:
            config: Конфигурация; используются log_level и log_file
        """
        root = logging.getLogger()
        root.setLevel(_parse_level(config.log_level))
        root.handlers.clear()

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if config.log_file:
            handlers.append(self._file_handler(config.log_file))

        formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)

        logger.info(f"Логирование настроено с уровнем: {config.log_level}")
        logger.debug(f"Файл лога: {config.log_file or 'не задан'}")

    @staticmethod
    def _file_handler(log_file: str) -> logging.Handler:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8'
        )

    def set_level(self, level: str) -> None:
        logging.getLogger().setLevel(_parse_level(level))
        logger.info(f"Уровень логирования изменен на: {level}")


def get_logger(name: str) -> logging.Logger:
    """Логгер модуля; name обычно __name__."""
    return logging.getLogger(name)


def setup_logging(config: 'Config') -> None:
    """Настраивает логирование. Вызывается при запуске, до открытия хранилища."""
    LoggerManager().setup_logging(config)


def set_log_level(level: str) -> None:
    LoggerManager().set_level(level)


def log_function_call(func_name: str, args: tuple = (), kwargs: Optional[dict] = None) -> None:
    """
    Пишет в DEBUG вызов операции с аргументами.

    Пример:
        >>> log_function_call("BookmarkStore.update_bookmark", ("id-1",), {"title": "Новое"})
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    parts = [str(arg) for arg in args]
    parts.extend(f"{k}={v}" for k, v in (kwargs or {}).items())
    logger.debug(f"Вызов функции: {func_name}({', '.join(parts)})")


def log_performance(func_name: str, duration: float, details: str = "") -> None:
    """
    Пишет длительность операции.

    Аргументы:
        func_name: Имя операции
        duration: Длительность в секундах
        details: Размеры коллекций и прочие подробности
    """
    details_str = f" ({details})" if details else ""
    logger.info(f"Производительность: {func_name} выполнена за {duration:.2f}с{details_str}")


def log_error_with_context(error: Exception, context: Dict[str, Any]) -> None:
    """
    Пишет ошибку вместе с контекстом операции (ключ, путь к файлу и т.д.).
    Используется там, где ошибка хранилища не передается вызывающему коду.
    """
    context_str = ", ".join(f"{k}={v}" for k, v in context.items())
    logger.error(f"Ошибка: {type(error).__name__}: {error} | Контекст: {context_str}")
