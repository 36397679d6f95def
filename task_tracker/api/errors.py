"""
Обработчики ошибок (Exception Handlers) для API.

Сервисы выбрасывают доменные ошибки (core/exceptions.py) без HTTP-кодов.
Здесь они превращаются в единый формат:

    {"error": {"code": "...", "message": "...", "details": [...]}}

Семейства статусов:
- дубликаты и валидация -> 400
- не найдено (или чужое) -> 404
- аутентификация -> 401
- всё остальное -> 500 (без внутренних деталей)
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.exceptions import (
    DuplicateEmailError,
    DuplicateNameError,
    FederationFailedError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TaskTrackerError,
    UnauthorizedError,
    ValidationFailedError,
)
from ..core.logging import get_logger
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = get_logger(__name__)

# Тип ошибки -> HTTP статус. Порядок не важен: проверяется точный класс и его предки.
STATUS_BY_ERROR: dict[type[TaskTrackerError], int] = {
    DuplicateEmailError: status.HTTP_400_BAD_REQUEST,
    DuplicateNameError: status.HTTP_400_BAD_REQUEST,
    ValidationFailedError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    InvalidTokenError: status.HTTP_401_UNAUTHORIZED,
    FederationFailedError: status.HTTP_401_UNAUTHORIZED,
}

AUTH_ERRORS = (InvalidCredentialsError, UnauthorizedError, InvalidTokenError)


def status_for(exc: TaskTrackerError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def domain_error_handler(request: Request, exc: TaskTrackerError) -> JSONResponse:
    """Доменная ошибка -> единый формат ErrorResponse."""
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(f"Domain Error: {exc.code}", exc_info=exc.__cause__ or exc)
    else:
        logger.warning(f"Domain Error: {exc.code} - {exc.message}")

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AUTH_ERRORS) else None
    return _error_response(status_code, exc.code, exc.message, details, headers)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Ошибки валидации Pydantic -> VALIDATION_ERROR (400).

    Pydantic:
        {"detail": [{"type": "string_too_short", "loc": ["body", "name"], "msg": "..."}]}

    Наш формат:
        {"error": {"code": "VALIDATION_ERROR", "message": "Validation failed",
                   "details": [{"field": "name", "message": "..."}]}}
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    details = []
    for error in exc.errors():
        # loc - путь к полю: ["body", "tagIds", 0] или ["query", "limit"]
        field_path = error.get("loc", [])
        if len(field_path) > 1 and field_path[0] in ("body", "query", "path"):
            field_path = field_path[1:]
        field_name = ".".join(str(p) for p in field_path) or "unknown"

        details.append(ErrorDetail(field=field_name, message=error.get("msg", "Invalid value")))

    return _error_response(
        status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Validation failed", details
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Всё непредвиденное -> 500.

    Клиент не видит ни stack trace, ни текст исключения.
    """
    logger.error(f"Internal Error: {type(exc).__name__}: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


def register_error_handlers(app):
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        register_error_handlers(app)
    """
    app.add_exception_handler(TaskTrackerError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
