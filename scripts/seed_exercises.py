import asyncio
import json
import sys
from pathlib import Path

# Добавляем корневую папку проекта в sys.path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from pydantic import ValidationError

from app.requests.exercise_requests import find_or_create_exercise
from app.schemas.exercise import ExerciseCreate
from database.connection import async_session_maker, create_tables


async def main(path: str):
    """
    Заполняет каталог упражнений из JSON-файла со списком объектов
    {"name", "primary_muscles", "secondary_muscles", "equipment", "movement_type"}.
    Дубликаты (по ключу поиска) пропускаются.
    """
    print("Начинаю заполнение каталога упражнений...")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_exercises = json.load(f)
        print("✅ JSON-файл с упражнениями успешно загружен.")
    except FileNotFoundError:
        print(f"❌ Ошибка: Файл '{path}' не найден.")
        return
    except json.JSONDecodeError:
        print("❌ Ошибка: Не удалось декодировать JSON из файла.")
        return

    exercises: list[ExerciseCreate] = []
    for item in raw_exercises:
        try:
            exercises.append(ExerciseCreate.model_validate(item))
        except ValidationError as e:
            print(f"⚠️ Пропускаю запись {item!r}: {e.errors()[0]['msg']}")

    if not exercises:
        print("⚠️ Упражнения для добавления не найдены.")
        return

    await create_tables()

    created_count = 0
    async with async_session_maker() as session:
        for exercise_data in exercises:
            exercise, created = await find_or_create_exercise(session, exercise_data)
            if created:
                created_count += 1
                print(f"[+] {exercise.name} ({exercise.equipment})")
            else:
                print(f"[=] {exercise_data.name} -> уже есть как '{exercise.name}'")

    print(f"✅ Добавлено {created_count} из {len(exercises)} упражнений.")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "exercises.json"))
