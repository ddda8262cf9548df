from fastapi import Depends

from app.services.llm_service import LLMService, llm_service
from app.services.workout_service import WorkoutService


def get_llm_service() -> LLMService:
    return llm_service


def get_workout_service(llm: LLMService = Depends(get_llm_service)) -> WorkoutService:
    return WorkoutService(llm=llm)
