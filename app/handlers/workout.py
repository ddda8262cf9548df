import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import CurrentUser, get_current_user
from app.dependencies.db import get_db_session
from app.dependencies.services import get_workout_service
from app.exceptions import RequestValidationFailedError
from app.schemas.workout import GenerateWorkoutResponse, GenerationRequest
from app.services.workout_service import WorkoutService
from app.utils.validation import first_validation_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workouts", tags=["workouts"])


async def _read_json_body(request: Request) -> Any:
    """Тело запроса как JSON. Пустое или битое тело - параметры по умолчанию."""
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("Request body is not valid JSON, using default parameters")
        return {}
    return body if body is not None else {}


def parse_generation_request(body: Any) -> GenerationRequest:
    """Проверяет параметры генерации. Ошибка - 400 с текстом первой проблемы."""
    if not isinstance(body, dict):
        raise RequestValidationFailedError("Request body must be a JSON object")
    try:
        return GenerationRequest.model_validate(body)
    except ValidationError as e:
        message = first_validation_message(e)
        logger.error(f"Request validation failed: {message}, body: {json.dumps(body)}")
        raise RequestValidationFailedError(message) from e


@router.post("/generate", response_model=GenerateWorkoutResponse)
async def generate_workout(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    workout_service: WorkoutService = Depends(get_workout_service),
) -> GenerateWorkoutResponse:
    """
    Генерирует тренировку по параметрам пользователя и сохраняет ее.
    """
    body = await _read_json_body(request)
    generation_request = parse_generation_request(body)

    workout_id = await workout_service.generate_for_user(
        session, user.id, generation_request
    )

    logger.info(f"Returning success response with workout ID: {workout_id}")
    return GenerateWorkoutResponse(success=True, workoutId=workout_id)
