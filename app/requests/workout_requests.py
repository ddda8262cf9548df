import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database.models import Workout, WorkoutExercise
from app.schemas.exercise import WorkoutExerciseLink, WorkoutSummary
from app.schemas.workout import GenerationRequest, GenerationResult


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(round(value))


def _as_list(value: Any) -> list[str] | None:
    """Модель иногда отдает строку вместо списка."""
    if value is None:
        return None
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item) for item in value]
    return None


async def count_recent_workouts(
    session: AsyncSession, user_id: str, window_hours: int
) -> int:
    """Количество тренировок пользователя за последние `window_hours` часов."""
    # created_at хранится с таймзоной, граница окна - в UTC
    since = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(hours=window_hours)
    stmt = select(func.count(Workout.id)).where(
        Workout.user_id == user_id,
        Workout.created_at >= since,
    )
    result = await session.execute(stmt)
    return result.scalar_one()


async def create_workout(
    session: AsyncSession,
    user_id: str,
    request: GenerationRequest,
    result: GenerationResult,
    ai_model: str,
) -> Workout:
    """Сохраняет сгенерированную тренировку вместе с метаданными генерации."""
    plan = result.plan
    usage = result.usage

    workout = Workout(
        user_id=user_id,
        total_duration_minutes=_as_int(plan.total_duration_minutes),
        muscle_groups_targeted=_as_list(plan.muscle_groups_targeted),
        joint_groups_affected=_as_list(plan.joint_groups_affected),
        equipment_needed=_as_list(plan.equipment_needed),
        workout_data=plan.model_dump(mode="json"),
        raw_ai_response=result.raw_response,
        ai_model=ai_model,
        prompt_tokens=usage.prompt_tokens if usage else None,
        completion_tokens=usage.completion_tokens if usage else None,
        generation_time_ms=result.generation_time_ms,
        parse_attempts=result.parse_attempts,
        muscle_focus=[m.value for m in request.muscle_focus],
        workout_focus=request.workout_focus,
        exercise_count=request.exercise_count,
        special_instructions=request.special_instructions,
    )
    session.add(workout)
    await session.commit()
    await session.refresh(workout)
    return workout


async def link_exercise_to_workout(
    session: AsyncSession,
    workout_id: int,
    exercise_id: int,
    link: WorkoutExerciseLink,
) -> WorkoutExercise:
    """Привязывает упражнение из каталога к тренировке."""
    workout_exercise = WorkoutExercise(
        workout_id=workout_id,
        exercise_id=exercise_id,
        **link.model_dump(),
    )
    session.add(workout_exercise)
    await session.commit()
    await session.refresh(workout_exercise)
    return workout_exercise


async def update_workout_summary(
    session: AsyncSession, workout_id: int, summary: WorkoutSummary
) -> None:
    """Записывает сводные поля тренировки."""
    stmt = (
        update(Workout)
        .where(Workout.id == workout_id)
        .values(
            total_sets=summary.total_sets,
            total_exercises=summary.total_exercises,
            estimated_duration_minutes=summary.estimated_duration_minutes,
            primary_muscles_targeted=summary.primary_muscles_targeted,
            equipment_needed_array=summary.equipment_needed,
        )
    )
    await session.execute(stmt)
    await session.commit()


async def get_workout_with_exercises(
    session: AsyncSession, workout_id: int
) -> Workout | None:
    """
    Получает тренировку со всеми связанными упражнениями.
    """
    stmt = (
        select(Workout)
        .where(Workout.id == workout_id)
        .options(selectinload(Workout.workout_exercises).selectinload(WorkoutExercise.exercise))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
