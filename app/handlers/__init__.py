from fastapi import APIRouter

from . import health, workout

# Главный роутер для всех обработчиков API
main_router = APIRouter(prefix="/api")
main_router.include_router(workout.router)

health_router = health.router
