"""
Модуль main.py
Командная строка для работы с хранилищем закладок без графического интерфейса.
Открывает хранилище, выполняет одну команду и сохраняет результат.
"""

import argparse
import asyncio
import sys
import time
from typing import List, Optional

from .config import ConfigManager
from .logger import (
    get_logger,
    log_error_with_context,
    log_function_call,
    log_performance,
    set_log_level,
    setup_logging,
)
from .models import Bookmark
from .store import BookmarkStore

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Парсит аргументы командной строки.

    Аргументы:
        argv: Аргументы (по умолчанию sys.argv[1:])

    Возвращает:
        argparse.Namespace: Объект с аргументами командной строки
    """
    parser = argparse.ArgumentParser(
        prog="bookmark-store",
        description="Управление коллекцией закладок и папок",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  bookmark-store list --folder uncategorized --search python
  bookmark-store add https://docs.python.org --title "Python Docs" --tag docs
  bookmark-store trash 3f2a...
  bookmark-store list --folder trash
  bookmark-store empty-trash
        """,
    )

    parser.add_argument(
        "--config", dest="config_path", help="Путь к .env файлу (по умолчанию: .env)"
    )
    parser.add_argument(
        "--store", dest="store_path", help="Путь к файлу хранилища (переопределяет STORE_PATH)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Подробное логирование (DEBUG уровень)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Показать закладки")
    list_parser.add_argument(
        "--folder",
        dest="folders",
        action="append",
        default=[],
        help="Папка для фильтра (можно несколько; uncategorized, trash)",
    )
    list_parser.add_argument("--search", default="", help="Строка поиска")

    add_parser = subparsers.add_parser("add", help="Добавить закладку")
    add_parser.add_argument("url", help="Адрес страницы")
    add_parser.add_argument("--title", default=None, help="Заголовок (по умолчанию адрес)")
    add_parser.add_argument("--description", default="", help="Описание")
    add_parser.add_argument("--tag", dest="tags", action="append", default=[], help="Тег")
    add_parser.add_argument("--folder", dest="folder_id", default=None, help="Идентификатор папки")

    for name, help_text in (
        ("trash", "Переместить закладку в корзину"),
        ("restore", "Восстановить закладку из корзины"),
        ("delete", "Удалить закладку безвозвратно"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("bookmark_id", help="Идентификатор закладки")

    subparsers.add_parser("empty-trash", help="Очистить корзину")
    subparsers.add_parser("folders", help="Показать папки")

    folder_parser = subparsers.add_parser("add-folder", help="Создать папку")
    folder_parser.add_argument("name", help="Название папки")

    return parser.parse_args(argv)


def format_bookmark(bookmark: Bookmark) -> str:
    """Строка для вывода закладки в списке."""
    tags = f" [{', '.join(bookmark.tags)}]" if bookmark.tags else ""
    deleted = " (в корзине)" if bookmark.deleted else ""
    return f"{bookmark.id}  {bookmark.date}  {bookmark.title} <{bookmark.url}>{tags}{deleted}"


async def run_command(args: argparse.Namespace, store: BookmarkStore) -> int:
    """
    Выполняет команду над открытым хранилищем.

    Аргументы:
        args: Аргументы командной строки
        store: Хранилище закладок

    Возвращает:
        int: Код завершения
    """
    log_function_call("run_command", (args.command,))

    if args.command == "list":
        store.preference("selected_folder_ids").set(args.folders, notify=False)
        store.preference("search_query").set(args.search, notify=False)
        for bookmark in store.filtered_bookmarks:
            print(format_bookmark(bookmark))
        return EXIT_OK

    if args.command == "add":
        bookmark = await store.add_bookmark(
            title=args.title or args.url,
            url=args.url,
            description=args.description,
            tags=args.tags,
            folder_id=args.folder_id,
        )
        print(bookmark.id)
        return EXIT_OK

    if args.command in ("trash", "restore", "delete"):
        operation = {
            "trash": store.remove_bookmark,
            "restore": store.restore_bookmark,
            "delete": store.remove_bookmark_permanent,
        }[args.command]
        if not await operation(args.bookmark_id):
            logger.error(f"Закладка не найдена: {args.bookmark_id}")
            return EXIT_NOT_FOUND
        return EXIT_OK

    if args.command == "empty-trash":
        removed = await store.empty_trash()
        print(f"Удалено закладок: {removed}")
        return EXIT_OK

    if args.command == "folders":
        for folder in store.folders:
            print(f"{folder.id}  {folder.name}")
        return EXIT_OK

    if args.command == "add-folder":
        print(await store.add_folder(args.name))
        return EXIT_OK

    raise ValueError(f"Неизвестная команда: {args.command}")


async def run(args: argparse.Namespace, store_path: str) -> int:
    """Открывает хранилище и выполняет команду."""
    store = BookmarkStore(store_path)
    if not await store.init():
        logger.error(f"Не удалось открыть хранилище: {store_path}")
        return EXIT_NOT_FOUND

    code = await run_command(args, store)
    await store.drain()
    return code


def main(argv: Optional[List[str]] = None) -> None:
    """
    Главная функция командной строки.
    """
    start_time = time.time()
    args = parse_arguments(argv)

    try:
        config = ConfigManager(args.config_path).get()
        if args.store_path:
            config.store_path = args.store_path

        setup_logging(config)
        if args.verbose:
            set_log_level("DEBUG")

        logger.debug(f"Файл хранилища: {config.store_path}")
        code = asyncio.run(run(args, config.store_path))

    except KeyboardInterrupt:
        logger.info("Программа прервана пользователем")
        sys.exit(1)
    except Exception as e:
        log_error_with_context(e, {"operation": "main", "command": args.command})
        sys.exit(1)

    log_performance("main", time.time() - start_time, f"command={args.command}")
    sys.exit(code)


if __name__ == "__main__":
    main()
