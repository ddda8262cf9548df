"""Pytest configuration: in-memory database, fake OpenAI client, HTTP client."""

import os

# Настройки читаются при импорте модулей приложения
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-for-workout-generator-api")
os.environ.setdefault("LOG_DIR", "/tmp/workout-generator-test-logs")

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config.settings import settings
from app.dependencies.db import get_db_session
from app.dependencies.services import get_llm_service
from app.main import app
from app.services.llm_service import LLMService
from database.models import Base

TEST_USER_ID = "3f6c1d2e-8a4b-4c1f-9e2d-7b5a6c4d3e21"


def make_exercise(name: str, catalog: bool = True, **overrides) -> dict:
    exercise = {
        "name": name,
        "sets": 3,
        "reps": 10,
        "rest_time_seconds": 60,
        "rationale": f"{name} builds the target muscles.",
    }
    if catalog:
        exercise.update(
            {
                "primary_muscles": ["chest"],
                "secondary_muscles": ["triceps"],
                "equipment": "barbell",
                "movement_type": "compound",
            }
        )
    exercise.update(overrides)
    return exercise


def make_plan(names: list[str] | None = None, catalog: bool = True) -> dict:
    names = names or [
        "Barbell Bench Press",
        "Incline Dumbbell Press",
        "Cable Fly",
        "Triceps Pushdown",
    ]
    exercises = [make_exercise(name, catalog) for name in names]
    for index, exercise in enumerate(exercises):
        exercise["order_index"] = index + 1
    return {
        "workout": {
            "total_duration_minutes": 45,
            "muscle_groups_targeted": ["chest", "triceps"],
            "joint_groups_affected": ["shoulders", "elbows"],
            "equipment_needed": ["barbell", "dumbbell", "cable"],
            "exercises": exercises,
        }
    }


def make_completion(content: str, prompt_tokens: int = 120, completion_tokens: int = 340):
    """Ответ chat.completions.create в том виде, в каком его читает сервис."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


def make_openai_client(*responses) -> MagicMock:
    """
    Фейковый AsyncOpenAI. Каждый элемент responses - текст ответа,
    исключение или готовый completion; отдаются по очереди.
    """
    side_effect = [
        make_completion(item) if isinstance(item, str) else item for item in responses
    ]
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=side_effect)
    return client


def make_token(user_id: str = TEST_USER_ID, **claims) -> str:
    payload = {"sub": user_id, **claims}
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


@pytest.fixture
def plan_factory():
    return make_plan


@pytest.fixture
def exercise_factory():
    return make_exercise


@pytest.fixture
def valid_plan_json():
    return json.dumps(make_plan())


@pytest.fixture
def openai_client_factory():
    return make_openai_client


@pytest.fixture
def completion_factory():
    return make_completion


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def openai_client():
    """Фейковый клиент модели; по умолчанию отвечает валидной тренировкой."""
    return make_openai_client(json.dumps(make_plan()))


@pytest.fixture
def llm(openai_client):
    return LLMService(client=openai_client)


@pytest.fixture
async def api_client(session_factory, llm):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_llm_service] = lambda: llm

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
