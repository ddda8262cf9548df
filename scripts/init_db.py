import asyncio
import sys
from pathlib import Path

# Добавляем корневую папку проекта в sys.path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from database.connection import create_tables


async def main():
    """Создает все таблицы, которых еще нет в базе данных."""
    await create_tables()
    print("✅ Таблицы созданы.")


if __name__ == "__main__":
    asyncio.run(main())
