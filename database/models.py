import enum
from datetime import datetime
from typing import Any, List

from sqlalchemy import (
    Integer,
    String,
    DateTime,
    ForeignKey,
    Enum,
    Text,
    JSON,
    func,
)
from sqlalchemy.orm import declarative_base, Mapped, mapped_column, relationship


Base = declarative_base()


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), onupdate=func.now(), server_default=func.now()
    )


class MuscleGroupEnum(str, enum.Enum):
    chest = "chest"
    back = "back"
    shoulders = "shoulders"
    biceps = "biceps"
    triceps = "triceps"
    forearms = "forearms"
    neck = "neck"
    core = "core"
    glutes = "glutes"
    quads = "quads"
    hamstrings = "hamstrings"
    calves = "calves"


class WorkoutFocusEnum(str, enum.Enum):
    cardio = "cardio"
    hypertrophy = "hypertrophy"
    isolation = "isolation"
    strength = "strength"
    speed = "speed"
    stability = "stability"
    activation = "activation"
    stretch = "stretch"
    mobility = "mobility"
    plyometric = "plyometric"


class MovementTypeEnum(str, enum.Enum):
    compound = "compound"
    isolation = "isolation"


class Exercise(Base, TimestampMixin):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    search_key: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    primary_muscles: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    secondary_muscles: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    equipment: Mapped[str] = mapped_column(String, nullable=False, default="bodyweight")
    movement_type: Mapped[MovementTypeEnum | None] = mapped_column(
        Enum(MovementTypeEnum), nullable=True
    )

    workout_exercises: Mapped[List["WorkoutExercise"]] = relationship(
        "WorkoutExercise", back_populates="exercise", cascade="all, delete-orphan"
    )


class Workout(Base, TimestampMixin):
    __tablename__ = "workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Идентификатор пользователя приходит из внешнего провайдера авторизации
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    total_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    muscle_groups_targeted: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    joint_groups_affected: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    equipment_needed: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    workout_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    raw_ai_response: Mapped[str | None] = mapped_column(Text, nullable=True)

    ai_model: Mapped[str | None] = mapped_column(String, nullable=True)
    prompt_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completion_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    generation_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    parse_attempts: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Параметры исходного запроса
    muscle_focus: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    workout_focus: Mapped[WorkoutFocusEnum] = mapped_column(
        Enum(WorkoutFocusEnum), nullable=False
    )
    exercise_count: Mapped[int] = mapped_column(Integer, nullable=False)
    special_instructions: Mapped[str] = mapped_column(String, default="", nullable=False)

    # Сводка по каталогу упражнений
    total_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_exercises: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    primary_muscles_targeted: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    equipment_needed_array: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    workout_exercises: Mapped[List["WorkoutExercise"]] = relationship(
        "WorkoutExercise", back_populates="workout", cascade="all, delete-orphan"
    )


class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False)
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    rest_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    rationale: Mapped[str | None] = mapped_column(Text, nullable=True)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="workout_exercises")
    exercise: Mapped["Exercise"] = relationship(
        "Exercise", back_populates="workout_exercises"
    )
