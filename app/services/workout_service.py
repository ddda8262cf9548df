import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.exceptions import (
    CatalogIntegrationError,
    GenerationFailedError,
    PersistenceError,
    RateLimitExceededError,
)
from app.requests import exercise_requests, workout_requests
from app.schemas.exercise import ExerciseCreate, ExerciseRecord, WorkoutExerciseLink
from app.schemas.workout import GenerationRequest, WorkoutPlan
from app.services.llm_service import LLMService, llm_service
from app.utils.workout_summary import calculate_workout_summary

logger = logging.getLogger(__name__)

GENERATION_ERROR_CODES = {
    "ModelTimeoutError": "MODEL_TIMEOUT",
    "ModelInvocationError": "MODEL_UNAVAILABLE",
    "ResponseUnparsableError": "RESPONSE_UNPARSABLE",
    "ResponseInvalidError": "RESPONSE_INVALID",
}


def _error_code(error_type: str | None) -> str:
    return GENERATION_ERROR_CODES.get(error_type or "", "GENERATION_FAILED")


class WorkoutService:
    def __init__(
        self,
        llm: LLMService = llm_service,
        daily_limit: int | None = None,
        window_hours: int | None = None,
        catalog_enabled: bool | None = None,
    ):
        self.llm = llm
        self.daily_limit = settings.RATE_LIMIT_PER_DAY if daily_limit is None else daily_limit
        self.window_hours = (
            settings.RATE_LIMIT_WINDOW_HOURS if window_hours is None else window_hours
        )
        self.catalog_enabled = (
            settings.EXERCISE_CATALOG_ENABLED if catalog_enabled is None else catalog_enabled
        )

    async def generate_for_user(
        self, session: AsyncSession, user_id: str, request: GenerationRequest
    ) -> int:
        """
        Главный метод: проверяет лимит, генерирует тренировку, сохраняет ее
        и связывает упражнения с каталогом. Возвращает ID тренировки.
        """
        # 1. Лимит проверяем до обращения к модели
        recent = await workout_requests.count_recent_workouts(
            session, user_id, self.window_hours
        )
        if recent >= self.daily_limit:
            logger.info(f"User {user_id} reached daily limit ({recent}/{self.daily_limit})")
            raise RateLimitExceededError(self.daily_limit)

        # Не держим транзакцию чтения открытой, пока ждем модель
        await session.commit()

        # 2. Генерация
        result = await self.llm.generate_workout(request, use_exercise_database=True)
        if not result.success:
            logger.error(f"Failed to generate workout: {result.error}")
            raise GenerationFailedError(
                result.error or "Unknown error", error_code=_error_code(result.error_type)
            )

        # 3. Сохранение основной записи - без нее запрос считается неудачным
        try:
            workout = await workout_requests.create_workout(
                session, user_id, request, result, settings.OPENAI_MODEL
            )
        except SQLAlchemyError as e:
            logger.exception("Database operation error")
            await session.rollback()
            raise PersistenceError(str(e)) from e

        workout_id = workout.id
        logger.info(f"Successfully inserted workout with ID: {workout_id}")

        # 4. Каталог упражнений - не обязателен для успеха
        if not self.catalog_enabled:
            logger.info("Exercise catalog integration is disabled, skipping")
            return workout_id

        try:
            records = await self._link_exercises(session, workout_id, result.plan)
        except CatalogIntegrationError as e:
            logger.error(f"Error during exercise database integration: {e}")
            logger.info("Continuing without exercise database integration")
            return workout_id

        # 5. Сводка по тренировке
        try:
            summary = calculate_workout_summary(records)
            await workout_requests.update_workout_summary(session, workout_id, summary)
        except Exception:
            logger.exception("Failed to update workout summary")
            await session.rollback()

        return workout_id

    async def _link_exercises(
        self, session: AsyncSession, workout_id: int, plan: WorkoutPlan
    ) -> list[ExerciseRecord]:
        """Находит или создает упражнения в каталоге и привязывает их по порядку."""
        records: list[ExerciseRecord] = []
        try:
            for index, exercise_data in enumerate(plan.exercises):
                rest_seconds = int(round(exercise_data.rest_time_seconds))
                sets = int(round(exercise_data.sets))

                exercise, created = await exercise_requests.find_or_create_exercise(
                    session,
                    ExerciseCreate(
                        name=exercise_data.name,
                        primary_muscles=exercise_data.primary_muscles or [],
                        secondary_muscles=exercise_data.secondary_muscles,
                        equipment=exercise_data.equipment,
                        movement_type=exercise_data.movement_type,
                    ),
                )
                logger.info(
                    f"{'Created' if created else 'Found'} exercise: {exercise.name} ({exercise.id})"
                )

                await workout_requests.link_exercise_to_workout(
                    session,
                    workout_id,
                    exercise.id,
                    WorkoutExerciseLink(
                        order_index=exercise_data.order_index or index + 1,
                        sets=sets,
                        reps=int(round(exercise_data.reps)),
                        rest_seconds=rest_seconds,
                        rationale=exercise_data.rationale,
                    ),
                )

                records.append(
                    ExerciseRecord(
                        name=exercise.name,
                        primary_muscles=exercise.primary_muscles,
                        equipment=exercise.equipment,
                        sets=sets,
                        rest_seconds=rest_seconds,
                    )
                )
        except Exception as e:
            logger.exception("Exercise database integration failed")
            await session.rollback()
            raise CatalogIntegrationError(str(e)) from e
        return records
