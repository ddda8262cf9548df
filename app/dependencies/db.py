from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from database.connection import create_session_pool


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Открывает сессию БД на время обработки запроса.
    'async with' гарантирует закрытие сессии даже при ошибке в обработчике.
    """
    session_pool = create_session_pool()
    async with session_pool() as session:
        yield session
