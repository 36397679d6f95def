"""
API endpoints для работы с тегами.

Теги принадлежат пользователю: имя уникально в пределах владельца,
у двух пользователей могут быть теги с одинаковым именем.
"""

from fastapi import APIRouter, Depends, status

from ..services import TagService
from .dependencies import get_tag_service
from .schemas import (
    ErrorResponse,
    MessageResponse,
    TagCreate,
    TagEnvelope,
    TagListResponse,
    TagMessageEnvelope,
    TagResponse,
    TagUpdate,
)

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    responses={401: {"model": ErrorResponse, "description": "Нет токена или токен недействителен"}},
)


# ============================================================================
# GET ALL TAGS
# ============================================================================


@router.get("", response_model=TagListResponse, summary="Получить все теги")
async def get_tags(service: TagService = Depends(get_tag_service)) -> TagListResponse:
    """
    Получить теги текущего пользователя (по алфавиту).

    Пример ответа:
    ```json
    {"tags": [{"id": "...", "name": "Personal", "color": "#10B981", ...}]}
    ```
    """
    tags = await service.list_tags()
    return TagListResponse(tags=[TagResponse.model_validate(t) for t in tags])


# ============================================================================
# GET TAG BY ID
# ============================================================================


@router.get(
    "/{tag_id}",
    response_model=TagEnvelope,
    summary="Получить тег по ID",
    responses={404: {"model": ErrorResponse, "description": "Тег не найден"}},
)
async def get_tag(tag_id: str, service: TagService = Depends(get_tag_service)) -> TagEnvelope:
    tag = await service.get_tag(tag_id)
    return TagEnvelope(tag=TagResponse.model_validate(tag))


# ============================================================================
# CREATE TAG
# ============================================================================


@router.post(
    "",
    response_model=TagMessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Создать тег",
    responses={
        400: {"model": ErrorResponse, "description": "Тег с таким именем уже существует"},
    },
)
async def create_tag(
    data: TagCreate, service: TagService = Depends(get_tag_service)
) -> TagMessageEnvelope:
    """
    Создать новый тег.

    Пример запроса:
    ```json
    {"name": "Work", "color": "#3B82F6"}
    ```

    Без color используется #3B82F6.
    """
    tag = await service.create_tag(name=data.name, color=data.color)
    return TagMessageEnvelope(
        message="Tag created successfully", tag=TagResponse.model_validate(tag)
    )


# ============================================================================
# UPDATE TAG
# ============================================================================


@router.put(
    "/{tag_id}",
    response_model=TagMessageEnvelope,
    summary="Обновить тег",
    responses={
        400: {"model": ErrorResponse, "description": "Имя занято или ошибка валидации"},
        404: {"model": ErrorResponse, "description": "Тег не найден"},
    },
)
async def update_tag(
    tag_id: str, data: TagUpdate, service: TagService = Depends(get_tag_service)
) -> TagMessageEnvelope:
    tag = await service.update_tag(tag_id, name=data.name, color=data.color)
    return TagMessageEnvelope(
        message="Tag updated successfully", tag=TagResponse.model_validate(tag)
    )


# ============================================================================
# DELETE TAG
# ============================================================================


@router.delete(
    "/{tag_id}",
    response_model=MessageResponse,
    summary="Удалить тег",
    description="Удаляет тег и снимает его со всех задач. Сами задачи не удаляются.",
    responses={404: {"model": ErrorResponse, "description": "Тег не найден"}},
)
async def delete_tag(
    tag_id: str, service: TagService = Depends(get_tag_service)
) -> MessageResponse:
    await service.delete_tag(tag_id)
    return MessageResponse(message="Tag deleted successfully")
