from pydantic import BaseModel, Field

from database.models import MovementTypeEnum


class ExerciseCreate(BaseModel):
    name: str
    primary_muscles: list[str] = Field(default_factory=list)
    secondary_muscles: list[str] | None = None
    equipment: str | None = None
    movement_type: MovementTypeEnum | None = None


class WorkoutExerciseLink(BaseModel):
    order_index: int
    sets: int
    reps: int
    rest_seconds: int
    rationale: str | None = None


class ExerciseRecord(BaseModel):
    """Упражнение из каталога вместе с параметрами из тренировки."""

    name: str
    primary_muscles: list[str] = Field(default_factory=list)
    equipment: str
    sets: int
    rest_seconds: int


class WorkoutSummary(BaseModel):
    total_sets: int
    total_exercises: int
    estimated_duration_minutes: int
    primary_muscles_targeted: list[str]
    equipment_needed: list[str]
