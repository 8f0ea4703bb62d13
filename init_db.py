"""
Скрипт для инициализации базы данных.

Создаёт все таблицы напрямую через SQLAlchemy (users, user_settings,
categories, tags, tasks, task_tags). Для продакшена используйте Alembic.
"""

import asyncio

from src.core.database import engine, init_db


async def main():
    """Создать все таблицы."""
    print("Создание таблиц...")
    await init_db()
    await engine.dispose()
    print("✓ Таблицы созданы успешно!")


if __name__ == "__main__":
    asyncio.run(main())
