"""
Модуль utils.py
Вспомогательные утилиты хранилища: даты, идентификаторы и валидация чисел.
"""

import logging
import math
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

# Настройка логера для модуля
logger = logging.getLogger(__name__)


class DateUtils:
    """Утилиты для работы с датами и временем."""

    @staticmethod
    def now_iso() -> str:
        """
        Возвращает текущее время UTC в ISO формате.

        Возвращает:
            str: Например, 2024-05-01T12:30:00.123456+00:00
        """
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def today_iso() -> str:
        """Возвращает сегодняшнюю дату в формате YYYY-MM-DD."""
        return date.today().isoformat()


class IdUtils:
    """Утилиты для генерации идентификаторов."""

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())


class ValidationUtils:
    """Утилиты для валидации значений, прочитанных из хранилища."""

    @staticmethod
    def is_finite_number(value: Any) -> bool:
        """
        Проверяет, что значение является конечным числом.
        bool не считается числом, хотя и является подклассом int.

        Аргументы:
            value: Проверяемое значение

        Возвращает:
            bool: True для int/float, не являющихся NaN или бесконечностью
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return math.isfinite(value)

    @staticmethod
    def clamp_int(value: Any, minimum: int, maximum: int) -> Optional[int]:
        """
        Округляет число и ограничивает его диапазоном [minimum, maximum].

        Аргументы:
            value: Исходное значение
            minimum: Нижняя граница
            maximum: Верхняя граница

        Возвращает:
            Optional[int]: Ограниченное значение или None, если значение не число
        """
        if not ValidationUtils.is_finite_number(value):
            logger.debug(f"Отброшено нечисловое значение: {value!r}")
            return None
        # 0.5 округляется вверх
        return min(maximum, max(minimum, math.floor(value + 0.5)))

    @staticmethod
    def is_string_list(value: Any) -> bool:
        """Проверяет, что значение является списком строк."""
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
