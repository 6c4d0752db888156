"""
Модуль models.py
Содержит модели данных хранилища закладок.
Закладки и папки сохраняются на диск, поэтому описаны через pydantic
(валидация при загрузке, camelCase-ключи в файле). Вкладки браузера
живут только в памяти и описаны обычным dataclass.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Literal

# Псевдо-папки: распознаются только фильтром представления и никогда не хранятся
UNCATEGORIZED_FOLDER_ID = "uncategorized"
TRASH_FOLDER_ID = "trash"

ViewMode = Literal["grid", "list"]
VIEW_MODES = ('grid', 'list')


class StoredModel(BaseModel):
    """
    Базовая модель записи, сохраняемой в хранилище.

    Незнакомые ключи записи сохраняются как есть и записываются обратно
    под теми же именами.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )

    def to_storage(self) -> Dict[str, Any]:
        """
        Представление записи для записи на диск.
        Отсутствующие необязательные поля не сохраняются.
        """
        return self.model_dump(by_alias=True, exclude_none=True)


class Bookmark(StoredModel):
    """
    Класс для представления одной закладки.

    Атрибуты:
        id: Уникальный идентификатор, не меняется за время жизни закладки
        title: Заголовок закладки
        url: URL-адрес страницы
        description: Описание
        tags: Теги (порядок не важен для поиска)
        folder_id: Идентификатор папки; None означает «без папки»
        date: Дата создания в формате YYYY-MM-DD
        icon: Иконка (необязательно)
        deleted: Закладка находится в корзине
        deleted_at: Время перемещения в корзину; задано тогда и только тогда, когда deleted
    """

    id: str
    title: str
    url: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    folder_id: Optional[str] = None
    date: str
    icon: Optional[str] = None
    deleted: bool = False
    deleted_at: Optional[str] = None

    @field_validator("description", "tags", "deleted", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # null в файле равнозначен отсутствующему полю
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class Folder(StoredModel):
    """
    Класс для представления папки. Папки не вкладываются друг в друга.

    Атрибуты:
        id: Уникальный идентификатор
        name: Название папки
    """

    id: str
    name: str


# Папки, создаваемые при первом запуске
SEED_FOLDERS = (
    ("1", "Work"),
    ("2", "Study"),
    ("3", "Entertainment"),
    ("4", "Read Later"),
)


def seed_folders() -> List[Folder]:
    """Возвращает новый список папок по умолчанию."""
    return [Folder(id=folder_id, name=name) for folder_id, name in SEED_FOLDERS]


@dataclass
class BrowserTab:
    """
    Вкладка встроенного браузера. Не сохраняется на диск.

    Атрибуты:
        id: Уникальный идентификатор вкладки
        url: Открытый адрес
        created_at: Время создания (ISO)
        last_active_at: Время последней активации (ISO)
        title: Заголовок страницы, если известен
    """
    id: str
    url: str
    created_at: str
    last_active_at: str
    title: Optional[str] = None
