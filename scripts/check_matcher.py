import sys
from pathlib import Path

# Добавляем корневую папку проекта в sys.path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.utils.exercise_matcher import (
    create_search_key,
    determine_movement_type,
    extract_equipment,
)

SAMPLE_NAMES = [
    "Barbell Bench Press",
    "Bench Press Barbell",
    "BENCH-PRESS (Barbell)",
    "DB Shoulder Press",
    "Cable Lateral Raise",
]


def main(names: list[str]):
    """Печатает ключ поиска, инвентарь и тип движения для названий упражнений."""
    print("Проверка нормализации названий упражнений:")
    print("-" * 30)
    for name in names:
        movement_type = determine_movement_type(name, [])
        print(
            f'"{name}" -> {create_search_key(name)} | '
            f"{extract_equipment(name)} | "
            f"{movement_type.value if movement_type else 'unknown'}"
        )
    print("-" * 30)


if __name__ == "__main__":
    main(sys.argv[1:] or SAMPLE_NAMES)
