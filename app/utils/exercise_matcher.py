import re

from database.models import MovementTypeEnum

# Порядок важен: побеждает первое совпадение
EQUIPMENT_KEYWORDS: tuple[str, ...] = (
    "barbell",
    "dumbbell",
    "cable",
    "machine",
    "kettlebell",
    "resistance band",
    "ez bar",
)
DEFAULT_EQUIPMENT = "bodyweight"

COMPOUND_KEYWORDS: tuple[str, ...] = (
    "squat", "deadlift", "press", "row", "pull", "clean", "snatch", "jerk",
    "thruster", "lunge", "push", "bench",
)
ISOLATION_KEYWORDS: tuple[str, ...] = (
    "curl", "extension", "raise", "fly", "lateral", "calf", "crunch",
    "kickback", "pulldown", "pullover",
)

_NON_LETTERS = re.compile(r"[^a-z\s]")


def create_search_key(exercise_name: str) -> str:
    """
    Приводит название упражнения к ключу поиска: нижний регистр, только буквы,
    слова отсортированы и склеены без разделителя.
    "Barbell Bench Press" и "BENCH-PRESS (Barbell)" дают один и тот же ключ.
    """
    cleaned = _NON_LETTERS.sub("", exercise_name.lower())
    words = [word for word in cleaned.split() if word]
    return "".join(sorted(words))


def extract_equipment(exercise_name: str) -> str:
    """Определяет инвентарь по названию упражнения."""
    lower_name = exercise_name.lower()
    for equipment in EQUIPMENT_KEYWORDS:
        if equipment in lower_name:
            return equipment
    return DEFAULT_EQUIPMENT


def determine_movement_type(
    exercise_name: str, primary_muscles: list[str]
) -> MovementTypeEnum | None:
    """
    Угадывает тип движения по ключевым словам в названии.
    Возвращает None, если определить не удалось.
    """
    lower_name = exercise_name.lower()

    for pattern in COMPOUND_KEYWORDS:
        if pattern in lower_name:
            return MovementTypeEnum.compound

    for pattern in ISOLATION_KEYWORDS:
        if pattern in lower_name:
            return MovementTypeEnum.isolation

    # Несколько основных мышц - скорее всего базовое упражнение
    if len(primary_muscles) > 1:
        return MovementTypeEnum.compound

    return None
