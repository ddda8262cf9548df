import math
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from database.models import MuscleGroupEnum, WorkoutFocusEnum, MovementTypeEnum

MAX_MUSCLE_FOCUS = 4
MIN_EXERCISE_COUNT = 1
MAX_EXERCISE_COUNT = 10
MAX_SPECIAL_INSTRUCTIONS_LENGTH = 140

ALLOWED_MUSCLES = {m.value for m in MuscleGroupEnum}
ALLOWED_FOCUS = {f.value for f in WorkoutFocusEnum}


class GenerationRequest(BaseModel):
    """Параметры генерации тренировки от пользователя."""

    model_config = ConfigDict(frozen=True)

    muscle_focus: List[MuscleGroupEnum] = Field(default_factory=list)
    workout_focus: WorkoutFocusEnum = WorkoutFocusEnum.hypertrophy
    exercise_count: int = 4
    special_instructions: str = ""

    @field_validator("muscle_focus", mode="before")
    @classmethod
    def check_muscle_focus(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("muscle_focus must be an array")
        if len(value) > MAX_MUSCLE_FOCUS:
            raise ValueError(f"Maximum {MAX_MUSCLE_FOCUS} muscle groups allowed")
        normalized = []
        for muscle in value:
            if not isinstance(muscle, str) or muscle.lower() not in ALLOWED_MUSCLES:
                raise ValueError("Invalid muscle group")
            normalized.append(muscle.lower())
        return normalized

    @field_validator("workout_focus", mode="before")
    @classmethod
    def check_workout_focus(cls, value: Any) -> str:
        # Пустое значение трактуем как фокус по умолчанию
        if value is None or value == "":
            return WorkoutFocusEnum.hypertrophy.value
        if isinstance(value, WorkoutFocusEnum):
            return value.value
        if not isinstance(value, str) or value.lower() not in ALLOWED_FOCUS:
            raise ValueError("Invalid workout focus")
        return value.lower()

    @field_validator("exercise_count", mode="before")
    @classmethod
    def check_exercise_count(cls, value: Any) -> int:
        # bool - подкласс int, поэтому проверяем его отдельно
        if (
            isinstance(value, bool)
            or not isinstance(value, int)
            or not MIN_EXERCISE_COUNT <= value <= MAX_EXERCISE_COUNT
        ):
            raise ValueError(
                f"Exercise count must be between {MIN_EXERCISE_COUNT} and {MAX_EXERCISE_COUNT}"
            )
        return value

    @field_validator("special_instructions", mode="before")
    @classmethod
    def check_special_instructions(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("special_instructions must be a string")
        if len(value) > MAX_SPECIAL_INSTRUCTIONS_LENGTH:
            raise ValueError(
                f"Special instructions must be {MAX_SPECIAL_INSTRUCTIONS_LENGTH} characters or less"
            )
        return value


class GeneratedExercise(BaseModel):
    """Упражнение в ответе модели. Проверенные поля уже прошли валидацию."""

    model_config = ConfigDict(extra="allow")

    name: str
    sets: int | float
    reps: int | float
    rest_time_seconds: int | float
    rationale: str
    order_index: int | None = None
    primary_muscles: List[str] | None = None
    secondary_muscles: List[str] | None = None
    equipment: str | None = None
    movement_type: MovementTypeEnum | None = None

    @field_validator("order_index", mode="before")
    @classmethod
    def drop_invalid_order(cls, value: Any) -> int | None:
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or (isinstance(value, float) and not math.isfinite(value))
            or value < 1
        ):
            return None
        return int(value)

    @field_validator("primary_muscles", "secondary_muscles", mode="before")
    @classmethod
    def drop_invalid_muscles(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        return [m for m in value if isinstance(m, str) and m.strip()]

    @field_validator("equipment", mode="before")
    @classmethod
    def drop_invalid_equipment(cls, value: Any) -> str | None:
        if not isinstance(value, str) or not value.strip():
            return None
        return value

    @field_validator("movement_type", mode="before")
    @classmethod
    def drop_unknown_movement(cls, value: Any) -> str | None:
        # В упрощенном режиме валидации тип движения может быть любым
        if value in ("compound", "isolation"):
            return value
        return None


class WorkoutPlan(BaseModel):
    """Тренировка из ответа модели (содержимое объекта "workout")."""

    model_config = ConfigDict(extra="allow")

    total_duration_minutes: Any = None
    muscle_groups_targeted: Any = None
    joint_groups_affected: Any = None
    equipment_needed: Any = None
    exercises: List[GeneratedExercise]


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationResult(BaseModel):
    """Итог работы конвейера генерации."""

    success: bool
    plan: WorkoutPlan | None = None
    error: str | None = None
    error_type: str | None = None
    raw_response: str | None = None
    parse_attempts: int = 0
    generation_time_ms: int = 0
    usage: TokenUsage | None = None
    prompts: List[str] = Field(default_factory=list)


class GenerateWorkoutResponse(BaseModel):
    success: bool = True
    workoutId: int
