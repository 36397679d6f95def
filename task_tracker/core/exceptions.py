"""
Доменные ошибки сервиса.

Каждая операция сервисного слоя либо возвращает результат,
либо выбрасывает ОДНУ из ошибок ниже. Неожиданные исключения
(ошибки БД, баги) перехватываются декоратором @operation
и превращаются в InternalFailureError без внутренних деталей.

HTTP-коды здесь не живут - их назначает api/errors.py.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from .logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class TaskTrackerError(Exception):
    """
    Базовый класс доменных ошибок.

    Attributes:
        code: Машиночитаемый код (DUPLICATE_EMAIL, NOT_FOUND, ...)
        message: Сообщение для клиента
        details: Ошибки по полям: [{"field": "email", "message": "..."}]
    """

    code = "ERROR"
    default_message = "Request failed"

    def __init__(self, message: str | None = None, details: list[dict] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class DuplicateEmailError(TaskTrackerError):
    code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists"


class InvalidCredentialsError(TaskTrackerError):
    """Один и тот же ответ для "нет пользователя" и "неверный пароль"."""

    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class DuplicateNameError(TaskTrackerError):
    code = "DUPLICATE_NAME"
    default_message = "Tag with this name already exists"


class NotFoundError(TaskTrackerError):
    """
    Ресурс не найден ИЛИ принадлежит другому пользователю.

    Использование:
        raise NotFoundError("Task")
        # Сообщение: "Task not found"
    """

    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class UnauthorizedError(TaskTrackerError):
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class InvalidTokenError(TaskTrackerError):
    code = "INVALID_TOKEN"
    default_message = "Invalid or expired token"


class FederationFailedError(TaskTrackerError):
    code = "FEDERATION_FAILED"
    default_message = "Third-party authentication failed"


class ValidationFailedError(TaskTrackerError):
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InternalFailureError(TaskTrackerError):
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


def operation(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """
    Граница операции сервисного слоя.

    Доменные ошибки пропускаются как есть, всё остальное логируется
    с traceback и заменяется на InternalFailureError.

    Использование:
        class TagService:
            @operation
            async def create_tag(self, name: str) -> Tag:
                ...
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except TaskTrackerError:
            raise
        except Exception as exc:
            logger.error(
                "Unexpected failure in operation",
                extra={"operation": func.__qualname__, "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise InternalFailureError() from exc

    return wrapper
