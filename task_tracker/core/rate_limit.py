"""
Rate limiting (slowapi).

Лимитер живёт в core, чтобы его могли импортировать и main.py,
и роутеры (декоратор @limiter.limit) без циклических импортов.

Ключ - IP адрес клиента. RATE_LIMIT_ENABLED=false отключает
лимиты целиком (используется в тестах).
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Кастомный обработчик превышения лимита запросов.

    Возвращает ошибку в едином формате ErrorResponse.
    """
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests, please try again later",
                "details": [{"field": "rate_limit", "message": str(exc.detail)}],
            }
        },
    )
