import math
from typing import Iterable

from app.schemas.exercise import ExerciseRecord, WorkoutSummary

# Среднее время выполнения одного подхода
SECONDS_PER_SET = 45


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return list(seen)


def calculate_workout_summary(records: list[ExerciseRecord]) -> WorkoutSummary:
    """Считает сводные поля тренировки по упражнениям из каталога."""
    total_sets = sum(record.sets for record in records)
    total_seconds = sum(
        record.sets * (SECONDS_PER_SET + record.rest_seconds) for record in records
    )
    return WorkoutSummary(
        total_sets=total_sets,
        total_exercises=len(records),
        estimated_duration_minutes=math.ceil(total_seconds / 60),
        primary_muscles_targeted=_unique(
            muscle for record in records for muscle in record.primary_muscles
        ),
        equipment_needed=_unique(record.equipment for record in records),
    )
