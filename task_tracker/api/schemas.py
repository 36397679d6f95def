"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.

Валидация формы запроса (длины, enum, email, цвет) происходит здесь,
ДО вызова сервисов: сервисный слой получает уже типизированные данные.

JSON использует camelCase (dueDate, tagIds, createdAt), но snake_case
на входе тоже принимается (populate_by_name=True).
"""

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from ..models import DEFAULT_TAG_COLOR, TaskPriority, TaskStatus

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# Строки, которые обрезаются по краям перед проверкой длины
UserName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
TaskTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
TaskDescription = Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]
TagName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class CamelModel(BaseModel):
    """Базовая схема: camelCase в JSON, чтение из SQLAlchemy моделей."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class UserRegister(CamelModel):
    """
    Схема регистрации (POST /api/auth/register).

    Пример запроса:
    {
        "email": "a@x.com",
        "name": "Alice",
        "password": "secret1"
    }
    """

    email: EmailStr
    name: UserName
    password: str = Field(..., min_length=6, description="Минимум 6 символов")


class UserLogin(CamelModel):
    """Схема входа (POST /api/auth/login)."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """
    Публичное представление пользователя.

    password_hash сюда НЕ входит и никогда не покидает сервер.
    """

    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    """
    Ответ на register/login/Google callback.

    Пример:
    {
        "message": "Login successful",
        "user": {"id": "...", "email": "a@x.com", "name": "Alice", ...},
        "token": "eyJhbGciOi..."
    }
    """

    message: str
    user: UserResponse
    token: str


class ProfileResponse(BaseModel):
    user: UserResponse


# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagCreate(CamelModel):
    """
    Схема для создания тега (POST /api/tags).

    Пример:
    {
        "name": "Work",
        "color": "#3B82F6"
    }
    """

    name: TagName
    color: str | None = Field(
        None, pattern=HEX_COLOR_PATTERN, description=f"#RRGGBB, по умолчанию {DEFAULT_TAG_COLOR}"
    )


class TagUpdate(CamelModel):
    """Схема для обновления тега (PUT /api/tags/{id}). Все поля опциональные."""

    name: TagName | None = None
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)


class TagResponse(CamelModel):
    id: str
    name: str
    color: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class TagEnvelope(BaseModel):
    tag: TagResponse


class TagMessageEnvelope(BaseModel):
    message: str
    tag: TagResponse


class TagListResponse(BaseModel):
    tags: list[TagResponse]


# ============================================================================
# TASK SCHEMAS
# ============================================================================


class TaskCreate(CamelModel):
    """
    Схема для создания задачи (POST /api/tasks).

    Пример запроса:
    {
        "title": "Buy milk",
        "priority": "LOW",
        "dueDate": "2026-10-20",
        "tagIds": ["0d7c..."]
    }
    """

    title: TaskTitle
    description: TaskDescription | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: date | None = None
    tag_ids: list[str] | None = None


class TaskUpdate(CamelModel):
    """
    Схема для частичного обновления задачи (PUT /api/tasks/{id}).

    Меняются только переданные поля. tagIds:
    - не передан -> теги не трогаем
    - передан (даже []) -> заменяем весь набор

    title, priority и status можно не передавать, но нельзя обнулить:
    null для них - ошибка валидации. description и dueDate null очищает.
    """

    title: TaskTitle | None = None
    description: TaskDescription | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_date: date | None = None
    tag_ids: list[str] | None = None

    @field_validator("title", "priority", "status")
    @classmethod
    def reject_null(cls, value):
        # Валидатор не вызывается для непереданных полей (default не валидируется)
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class TaskResponse(CamelModel):
    """Задача с уже разрешёнными тегами."""

    id: str
    title: str
    description: str | None
    priority: TaskPriority
    status: TaskStatus
    due_date: date | None
    user_id: str
    created_at: datetime
    updated_at: datetime
    tags: list[TagResponse] = []


class TaskEnvelope(BaseModel):
    task: TaskResponse


class TaskMessageEnvelope(BaseModel):
    message: str
    task: TaskResponse


class Pagination(BaseModel):
    """
    Метаданные пагинации.

    pages = ceil(total / limit)
    """

    page: int
    limit: int
    total: int
    pages: int


class TaskListResponse(BaseModel):
    """
    Пример ответа GET /api/tasks?priority=HIGH&page=1&limit=10:
    {
        "tasks": [...],
        "pagination": {"page": 1, "limit": 10, "total": 23, "pages": 3}
    }
    """

    tasks: list[TaskResponse]
    pagination: Pagination


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Ошибка конкретного поля.

    Пример:
    {
        "field": "email",
        "message": "value is not a valid email address"
    }
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Примеры кодов:
    - VALIDATION_ERROR: ошибка валидации полей
    - DUPLICATE_EMAIL / DUPLICATE_NAME: уже существует
    - INVALID_CREDENTIALS / UNAUTHORIZED: ошибка аутентификации
    - NOT_FOUND: ресурс не найден (или чужой)
    - INTERNAL_ERROR: внутренняя ошибка сервера
    """

    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, NOT_FOUND, etc.)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(
        default=None, description="Список ошибок по полям (для валидации)"
    )


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Пример:
    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Task not found",
            "details": null
        }
    }
    """

    error: ErrorBody


class MessageResponse(BaseModel):
    """Успешная операция без данных (например, удаление)."""

    message: str
