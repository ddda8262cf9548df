import datetime
import json

import httpx
import pytest
from openai import APIConnectionError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.exceptions import GenerationFailedError, PersistenceError, RateLimitExceededError
from app.requests import exercise_requests, workout_requests
from app.schemas.exercise import ExerciseCreate
from app.schemas.workout import GenerationRequest
from app.services.llm_service import LLMService
from app.services.workout_service import WorkoutService
from database.models import Exercise, Workout, WorkoutExercise, WorkoutFocusEnum

USER_ID = "user-1"


@pytest.fixture
def request_params():
    return GenerationRequest.model_validate(
        {
            "muscle_focus": ["chest", "triceps"],
            "workout_focus": "hypertrophy",
            "exercise_count": 4,
            "special_instructions": "No dips",
        }
    )


def db_error() -> OperationalError:
    return OperationalError("INSERT INTO exercises", {}, Exception("database is locked"))


async def add_workouts(session, count: int, hours_ago: float = 1, user_id: str = USER_ID):
    created_at = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(hours=hours_ago)
    for _ in range(count):
        session.add(
            Workout(
                user_id=user_id,
                workout_data={"exercises": []},
                workout_focus=WorkoutFocusEnum.hypertrophy,
                exercise_count=4,
                created_at=created_at,
            )
        )
    await session.commit()


class TestRateLimit:
    async def test_limit_reached_blocks_generation(self, session, llm, openai_client, request_params):
        await add_workouts(session, 100)
        service = WorkoutService(llm=llm)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.generate_for_user(session, USER_ID, request_params)

        assert exc_info.value.status_code == 429
        openai_client.chat.completions.create.assert_not_awaited()

    async def test_old_and_foreign_workouts_do_not_count(self, session, llm, request_params):
        await add_workouts(session, 100, hours_ago=25)
        await add_workouts(session, 100, user_id="someone-else")
        await add_workouts(session, 99)
        service = WorkoutService(llm=llm)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)
        assert workout_id

    async def test_custom_limit(self, session, llm, request_params):
        await add_workouts(session, 2)
        service = WorkoutService(llm=llm, daily_limit=2)

        with pytest.raises(RateLimitExceededError):
            await service.generate_for_user(session, USER_ID, request_params)


class TestGenerateForUser:
    async def test_workout_is_persisted(self, session, session_factory, llm, request_params):
        service = WorkoutService(llm=llm, catalog_enabled=True)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)

        async with session_factory() as check:
            workout = await workout_requests.get_workout_with_exercises(check, workout_id)

        assert workout.user_id == USER_ID
        assert workout.total_duration_minutes == 45
        assert workout.muscle_groups_targeted == ["chest", "triceps"]
        assert workout.equipment_needed == ["barbell", "dumbbell", "cable"]
        assert len(workout.workout_data["exercises"]) == 4
        assert json.loads(workout.raw_ai_response)["workout"]["total_duration_minutes"] == 45
        assert workout.prompt_tokens == 120
        assert workout.completion_tokens == 340
        assert workout.parse_attempts == 1
        assert workout.generation_time_ms is not None
        assert workout.muscle_focus == ["chest", "triceps"]
        assert workout.workout_focus == WorkoutFocusEnum.hypertrophy
        assert workout.exercise_count == 4
        assert workout.special_instructions == "No dips"

    async def test_exercises_linked_and_summary_written(
        self, session, session_factory, llm, request_params
    ):
        service = WorkoutService(llm=llm, catalog_enabled=True)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)

        async with session_factory() as check:
            workout = await workout_requests.get_workout_with_exercises(check, workout_id)

        links = sorted(workout.workout_exercises, key=lambda link: link.order_index)
        assert [link.exercise.name for link in links] == [
            "Barbell Bench Press",
            "Incline Dumbbell Press",
            "Cable Fly",
            "Triceps Pushdown",
        ]
        assert [link.order_index for link in links] == [1, 2, 3, 4]
        assert all(link.sets == 3 and link.reps == 10 and link.rest_seconds == 60 for link in links)
        assert links[0].rationale == "Barbell Bench Press builds the target muscles."

        assert workout.total_sets == 12
        assert workout.total_exercises == 4
        # 4 упражнения * 3 подхода * (45 + 60) секунд
        assert workout.estimated_duration_minutes == 21
        assert workout.primary_muscles_targeted == ["chest"]
        assert workout.equipment_needed_array == ["barbell"]

    async def test_exercise_names_are_deduplicated(
        self, session, openai_client_factory, plan_factory, request_params
    ):
        plan = plan_factory(
            ["Barbell Bench Press", "Bench Press, Barbell", "Cable Fly", "Triceps Pushdown"]
        )
        llm = LLMService(client=openai_client_factory(json.dumps(plan)))
        service = WorkoutService(llm=llm, catalog_enabled=True)

        await service.generate_for_user(session, USER_ID, request_params)

        exercises = (await session.execute(select(func.count(Exercise.id)))).scalar_one()
        links = (await session.execute(select(func.count(WorkoutExercise.id)))).scalar_one()
        assert exercises == 3
        assert links == 4

    async def test_catalog_reused_between_workouts(self, session, openai_client_factory, plan_factory, request_params):
        plan_json = json.dumps(plan_factory())
        llm = LLMService(client=openai_client_factory(plan_json, plan_json))
        service = WorkoutService(llm=llm, catalog_enabled=True)

        first = await service.generate_for_user(session, USER_ID, request_params)
        second = await service.generate_for_user(session, USER_ID, request_params)

        assert first != second
        exercises = (await session.execute(select(func.count(Exercise.id)))).scalar_one()
        assert exercises == 4

    async def test_catalog_disabled(self, session, session_factory, llm, request_params):
        service = WorkoutService(llm=llm, catalog_enabled=False)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)

        async with session_factory() as check:
            workout = await workout_requests.get_workout_with_exercises(check, workout_id)
        assert workout.workout_exercises == []
        assert workout.total_sets is None

    async def test_catalog_failure_is_not_fatal(
        self, monkeypatch, session, session_factory, llm, request_params
    ):
        async def broken_find_or_create(session, exercise_data):
            raise db_error()

        monkeypatch.setattr(exercise_requests, "find_or_create_exercise", broken_find_or_create)
        service = WorkoutService(llm=llm, catalog_enabled=True)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)

        async with session_factory() as check:
            workout = await workout_requests.get_workout_with_exercises(check, workout_id)
        assert workout is not None
        assert workout.workout_exercises == []
        assert workout.total_sets is None

    async def test_summary_failure_is_not_fatal(
        self, monkeypatch, session, session_factory, llm, request_params
    ):
        async def broken_update(session, workout_id, summary):
            raise db_error()

        monkeypatch.setattr(workout_requests, "update_workout_summary", broken_update)
        service = WorkoutService(llm=llm, catalog_enabled=True)

        workout_id = await service.generate_for_user(session, USER_ID, request_params)

        async with session_factory() as check:
            workout = await workout_requests.get_workout_with_exercises(check, workout_id)
        assert len(workout.workout_exercises) == 4
        assert workout.total_sets is None

    async def test_persistence_failure_raises(self, monkeypatch, session, llm, request_params):
        async def broken_create(*args, **kwargs):
            raise db_error()

        monkeypatch.setattr(workout_requests, "create_workout", broken_create)
        service = WorkoutService(llm=llm)

        with pytest.raises(PersistenceError) as exc_info:
            await service.generate_for_user(session, USER_ID, request_params)
        assert exc_info.value.detail.startswith("Failed to save workout:")

    async def test_generation_failure_raises(
        self, session, openai_client_factory, request_params
    ):
        llm = LLMService(client=openai_client_factory("nope", "still nope"))
        service = WorkoutService(llm=llm)

        with pytest.raises(GenerationFailedError) as exc_info:
            await service.generate_for_user(session, USER_ID, request_params)

        assert exc_info.value.detail.startswith(
            "Failed to generate workout: Failed to parse response after retry:"
        )
        count = (await session.execute(select(func.count(Workout.id)))).scalar_one()
        assert count == 0


async def test_exercise_lookup_ignores_word_order(session):
    created, was_created = await exercise_requests.find_or_create_exercise(
        session,
        ExerciseCreate(name="Romanian Deadlift", primary_muscles=["hamstrings"]),
    )
    assert was_created
    assert created.equipment == "bodyweight"
    assert created.movement_type.value == "compound"

    found = await exercise_requests.get_exercise_by_name(session, "deadlift, romanian")
    assert found.id == created.id


async def test_unexpected_catalog_error_is_not_fatal(
    monkeypatch, session, session_factory, llm, request_params
):
    async def broken_find_or_create(session, exercise_data):
        raise ValueError("unexpected exercise payload")

    monkeypatch.setattr(exercise_requests, "find_or_create_exercise", broken_find_or_create)
    service = WorkoutService(llm=llm, catalog_enabled=True)

    workout_id = await service.generate_for_user(session, USER_ID, request_params)

    async with session_factory() as check:
        workout = await workout_requests.get_workout_with_exercises(check, workout_id)
    assert workout is not None
    assert workout.workout_exercises == []


async def test_unexpected_summary_error_is_not_fatal(
    monkeypatch, session, session_factory, llm, request_params
):
    async def broken_update(session, workout_id, summary):
        raise RuntimeError("summary writer crashed")

    monkeypatch.setattr(workout_requests, "update_workout_summary", broken_update)
    service = WorkoutService(llm=llm, catalog_enabled=True)

    workout_id = await service.generate_for_user(session, USER_ID, request_params)

    async with session_factory() as check:
        workout = await workout_requests.get_workout_with_exercises(check, workout_id)
    assert len(workout.workout_exercises) == 4


async def test_no_open_transaction_during_model_call(
    session, openai_client_factory, plan_factory, completion_factory, request_params
):
    await add_workouts(session, 3)
    states = []

    async def create(**kwargs):
        states.append(session.in_transaction())
        return completion_factory(json.dumps(plan_factory()))

    client = openai_client_factory()
    client.chat.completions.create.side_effect = create
    service = WorkoutService(llm=LLMService(client=client))

    await service.generate_for_user(session, USER_ID, request_params)

    assert states == [False]


async def test_recent_window_uses_utc(session):
    column_type = Workout.__table__.c.created_at.type
    assert column_type.timezone is True

    await add_workouts(session, 1, hours_ago=23.5)
    await add_workouts(session, 1, hours_ago=24.5)

    assert await workout_requests.count_recent_workouts(session, USER_ID, 24) == 1


@pytest.mark.parametrize(
    "responses, error_code",
    [
        (("not json", "still not json"), "RESPONSE_UNPARSABLE"),
        (('{"workout": {"exercises": []}}',) * 2, "RESPONSE_INVALID"),
    ],
)
async def test_generation_error_code(
    session, openai_client_factory, request_params, responses, error_code
):
    llm = LLMService(client=openai_client_factory(*responses))
    service = WorkoutService(llm=llm)

    with pytest.raises(GenerationFailedError) as exc_info:
        await service.generate_for_user(session, USER_ID, request_params)
    assert exc_info.value.error_code == error_code


async def test_model_unavailable_error_code(session, openai_client_factory, request_params):
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat"))
    service = WorkoutService(llm=LLMService(client=openai_client_factory(error)))

    with pytest.raises(GenerationFailedError) as exc_info:
        await service.generate_for_user(session, USER_ID, request_params)
    assert exc_info.value.error_code == "MODEL_UNAVAILABLE"
