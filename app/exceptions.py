import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Базовая ошибка API с единым форматом ответа."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str,
        details: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.details = details


class AuthenticationMissingError(APIException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class RequestValidationFailedError(APIException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_FAILED",
        )


class RateLimitExceededError(APIException):
    def __init__(self, limit: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Daily limit reached. Try again tomorrow.",
            error_code="RATE_LIMIT_EXCEEDED",
        )
        self.limit = limit


class GenerationFailedError(APIException):
    """Модель не вернула пригодную тренировку (после повтора) или запрос к ней упал."""

    def __init__(self, reason: str, error_code: str = "GENERATION_FAILED"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate workout: {reason}",
            error_code=error_code,
        )


class PersistenceError(APIException):
    def __init__(self, reason: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save workout: {reason}",
            error_code="PERSISTENCE_FAILED",
        )


class CatalogIntegrationError(Exception):
    """Не удалось связать упражнения с каталогом. Не прерывает запрос."""


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": exc.detail}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": str(exc)},
    )
