"""
Тесты для модуля kv_store.py
Проверяют чтение, значения по умолчанию и атомарную запись JSON-хранилища.
"""
import pytest

from bookmark_store.kv_store import JsonFileStore, StoreFormatError
from tests.conftest import read_store_file


class TestJsonFileStore:
    """Тесты для класса JsonFileStore."""

    @pytest.mark.asyncio
    async def test_missing_file_returns_defaults(self, temp_dir):
        kv = await JsonFileStore.load(temp_dir / "store.json", {"ui.theme": "system"})

        assert await kv.get("ui.theme") == "system"
        assert await kv.get("bookmarks") is None
        assert not (temp_dir / "store.json").exists()

    @pytest.mark.asyncio
    async def test_save_and_reload(self, temp_dir):
        path = temp_dir / "nested" / "store.json"
        kv = await JsonFileStore.load(path, {"ui.theme": "system"})
        await kv.set("bookmarks", [{"id": "b1", "title": "Пример"}])
        await kv.set("ui.theme", "dark")
        await kv.save()

        assert read_store_file(path) == {
            "bookmarks": [{"id": "b1", "title": "Пример"}],
            "ui.theme": "dark",
        }
        assert not path.with_suffix(".json.tmp").exists()

        reloaded = await JsonFileStore.load(path, {"ui.theme": "system"})
        assert await reloaded.get("ui.theme") == "dark"
        assert await reloaded.get("bookmarks") == [{"id": "b1", "title": "Пример"}]

    @pytest.mark.asyncio
    async def test_defaults_are_not_written(self, temp_dir):
        path = temp_dir / "store.json"
        kv = await JsonFileStore.load(path, {"ui.theme": "system"})
        await kv.set("folders", [])
        await kv.save()

        assert read_store_file(path) == {"folders": []}

    @pytest.mark.asyncio
    async def test_set_without_save_does_not_touch_disk(self, temp_dir):
        path = temp_dir / "store.json"
        kv = await JsonFileStore.load(path)
        await kv.set("folders", [])
        assert not path.exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["{broken", "[1, 2, 3]", '"text"'])
    async def test_malformed_file_raises(self, temp_dir, content):
        path = temp_dir / "store.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(StoreFormatError):
            await JsonFileStore.load(path)

    @pytest.mark.asyncio
    async def test_empty_file_is_empty_store(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text("  \n", encoding="utf-8")

        kv = await JsonFileStore.load(path)
        assert await kv.get("bookmarks") is None
