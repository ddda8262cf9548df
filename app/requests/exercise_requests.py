import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Exercise
from app.schemas.exercise import ExerciseCreate
from app.utils.exercise_matcher import (
    create_search_key,
    determine_movement_type,
    extract_equipment,
)

logger = logging.getLogger(__name__)


async def get_exercise_by_search_key(
    session: AsyncSession, search_key: str
) -> Exercise | None:
    """Получает упражнение из каталога по нормализованному ключу."""
    stmt = select(Exercise).where(Exercise.search_key == search_key)
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_exercise_by_name(
    session: AsyncSession, name: str
) -> Exercise | None:
    """Ищет упражнение по названию с учетом порядка слов и пунктуации."""
    return await get_exercise_by_search_key(session, create_search_key(name))


async def find_or_create_exercise(
    session: AsyncSession, exercise_data: ExerciseCreate
) -> tuple[Exercise, bool]:
    """
    Находит упражнение в каталоге или создает новое.
    Возвращает (упражнение, было ли оно создано).
    """
    search_key = create_search_key(exercise_data.name)
    exercise = await get_exercise_by_search_key(session, search_key)
    if exercise:
        return exercise, False

    primary_muscles = exercise_data.primary_muscles
    exercise = Exercise(
        name=exercise_data.name,
        search_key=search_key,
        primary_muscles=primary_muscles,
        secondary_muscles=exercise_data.secondary_muscles or [],
        equipment=exercise_data.equipment or extract_equipment(exercise_data.name),
        movement_type=exercise_data.movement_type
        or determine_movement_type(exercise_data.name, primary_muscles),
    )
    session.add(exercise)
    try:
        await session.commit()
    except IntegrityError:
        # Параллельный запрос уже создал упражнение с таким ключом
        await session.rollback()
        existing = await get_exercise_by_search_key(session, search_key)
        if existing is None:
            raise
        logger.info(f"Exercise '{exercise_data.name}' was created concurrently, reusing it")
        return existing, False

    await session.refresh(exercise)
    return exercise, True
