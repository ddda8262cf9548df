import math
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

EXERCISE_COUNT_TOLERANCE = 2
MOVEMENT_TYPES = ("compound", "isolation")


@dataclass(frozen=True)
class PlanValidationResult:
    valid: bool
    error: str | None = None


def _is_number(value: Any) -> bool:
    # bool в Python - подкласс int, для модели это не число.
    # json разбирает 1e400 в inf, а NaN и Infinity принимает как есть
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and (isinstance(value, int) or math.isfinite(value))
    )


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _fail(error: str) -> PlanValidationResult:
    return PlanValidationResult(valid=False, error=error)


def validate_workout_data(
    data: Any,
    expected_exercise_count: int | None = None,
    use_exercise_database: bool = True,
) -> PlanValidationResult:
    """
    Проверяет структуру тренировки из ответа модели.
    Останавливается на первой ошибке и возвращает только ее.
    """
    if not isinstance(data, dict):
        return _fail("Response is not an object")

    workout = data.get("workout")
    if not isinstance(workout, dict):
        return _fail("Missing workout object")

    exercises = workout.get("exercises")
    if not isinstance(exercises, list):
        return _fail("Workout does not contain an exercises array")

    if not exercises:
        return _fail("Exercises array is empty")

    # Допускаем расхождение с запрошенным количеством на пару упражнений
    if expected_exercise_count and abs(len(exercises) - expected_exercise_count) > EXERCISE_COUNT_TOLERANCE:
        return _fail(
            f"Expected around {expected_exercise_count} exercises but got {len(exercises)}"
        )

    for index, exercise in enumerate(exercises):
        if not isinstance(exercise, dict):
            return _fail(f"Exercise at index {index} is not an object")

        name = exercise.get("name")
        if not _is_non_empty_string(name):
            return _fail(f"Exercise at index {index} is missing a name")

        sets = exercise.get("sets")
        if not _is_number(sets) or sets <= 0:
            return _fail(f"Exercise {name} has invalid sets")

        reps = exercise.get("reps")
        if not _is_number(reps) or reps <= 0:
            return _fail(f"Exercise {name} has invalid reps")

        rest = exercise.get("rest_time_seconds")
        if not _is_number(rest) or rest < 0:
            return _fail(f"Exercise {name} has invalid rest time")

        if not _is_non_empty_string(exercise.get("rationale")):
            return _fail(f"Exercise {name} is missing a rationale")

        if not use_exercise_database:
            continue

        primary_muscles = exercise.get("primary_muscles")
        if not isinstance(primary_muscles, list) or not primary_muscles:
            return _fail(f"Exercise {name} is missing primary_muscles array")

        # Вторичные мышцы могут быть пустым списком, но список обязателен
        if not isinstance(exercise.get("secondary_muscles"), list):
            return _fail(f"Exercise {name} is missing secondary_muscles array")

        if not _is_non_empty_string(exercise.get("equipment")):
            return _fail(f"Exercise {name} is missing equipment")

        if exercise.get("movement_type") not in MOVEMENT_TYPES:
            return _fail(f"Exercise {name} has invalid movement_type")

    return PlanValidationResult(valid=True)


def validate_with_fallback(
    data: Any, expected_exercise_count: int | None, use_exercise_database: bool
) -> tuple[PlanValidationResult, bool]:
    """
    Валидация с откатом: если не хватает полей каталога, пробуем
    проверить ту же тренировку в упрощенном режиме.
    Возвращает (результат, использовались ли поля каталога).
    """
    result = validate_workout_data(data, expected_exercise_count, use_exercise_database)
    if result.valid or not use_exercise_database:
        return result, use_exercise_database

    fallback = validate_workout_data(data, expected_exercise_count, False)
    if fallback.valid:
        return fallback, False
    return result, True


def first_validation_message(exc: ValidationError) -> str:
    """Достает текст первой ошибки pydantic без префикса "Value error, "."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    original = error.get("ctx", {}).get("error")
    if isinstance(original, ValueError):
        return str(original)
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else error["msg"]
