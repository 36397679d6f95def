"""
Скрипт для инициализации базы данных.

Создаёт все таблицы напрямую через SQLAlchemy.
Используется для локальной разработки на SQLite вместо Alembic миграций.

Запуск:
    DATABASE_URL=sqlite+aiosqlite:///./task_tracker.db python init_db.py
"""

import asyncio

from task_tracker.core.database import init_db


async def main():
    """Создать все таблицы."""
    print("Создание таблиц...")
    await init_db()
    print("✓ Таблицы созданы успешно!")


if __name__ == "__main__":
    asyncio.run(main())
