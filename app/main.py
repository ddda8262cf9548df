import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config.logging import setup_logging
from app.exceptions import APIException, api_exception_handler, unhandled_exception_handler
from app.handlers import health_router, main_router
from database.connection import create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Запуск и остановка приложения"""
    setup_logging()
    logger.info("Запуск API...")

    # Создание таблиц в БД
    await create_tables()

    yield

    logger.info("API остановлен")


def create_app() -> FastAPI:
    app = FastAPI(title="Workout Generator API", lifespan=lifespan)

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(main_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
