"""
Авторизация запросов.

Токены выпускает внешний провайдер (HS256 JWT, идентификатор
пользователя в claim "sub"). Здесь токен только проверяется.
"""
import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config.settings import settings
from app.exceptions import AuthenticationMissingError

logger = logging.getLogger(__name__)

# auto_error=False: без заголовка отвечаем 401, а не 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str


def decode_access_token(token: str) -> dict | None:
    """Проверяет подпись и срок действия токена. None - если токен невалиден."""
    if not settings.AUTH_JWT_SECRET:
        logger.error("AUTH_JWT_SECRET is not configured, rejecting token")
        return None
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options={"verify_aud": settings.AUTH_JWT_AUDIENCE is not None},
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser:
    """Возвращает пользователя из bearer-токена или отвечает 401."""
    if not credentials:
        raise AuthenticationMissingError()

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationMissingError("Invalid authentication credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationMissingError("Invalid token payload")

    return CurrentUser(id=str(user_id))
