"""
API endpoints для работы с задачами.

Все endpoints требуют bearer-токен: задачи видны только владельцу.
Чужая задача неотличима от несуществующей (404 "Task not found").

Включает:
- CRUD операции
- Фильтрацию (priority, status, search) и пагинацию
- Замену набора тегов задачи
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..models import TaskPriority, TaskStatus
from ..services import TaskFilters, TaskPage, TaskService
from ..services.task import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from .dependencies import get_task_service
from .schemas import (
    ErrorResponse,
    MessageResponse,
    Pagination,
    TaskCreate,
    TaskEnvelope,
    TaskListResponse,
    TaskMessageEnvelope,
    TaskResponse,
    TaskUpdate,
)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={401: {"model": ErrorResponse, "description": "Нет токена или токен недействителен"}},
)


def _page_response(page: TaskPage) -> TaskListResponse:
    return TaskListResponse(
        tasks=[TaskResponse.model_validate(t) for t in page.tasks],
        pagination=Pagination(
            page=page.page, limit=page.limit, total=page.total, pages=page.pages
        ),
    )


# ============================================================================
# GET ALL TASKS (с фильтрацией и пагинацией)
# ============================================================================


@router.get(
    "",
    response_model=TaskListResponse,
    summary="Получить задачи с фильтрами",
    description="""
    Получить задачи текущего пользователя (новые первыми).

    **Фильтры:**
    - priority: HIGH, MEDIUM, LOW или all
    - status: PENDING, IN_PROGRESS, COMPLETED, CANCELLED или all
    - search: подстрока в названии или описании (без учёта регистра)

    **Пагинация:**
    - page: номер страницы (с 1)
    - limit: задач на странице (1-100)

    Все фильтры комбинируются через AND.
    """,
    responses={400: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def get_tasks(
    # Фильтры
    priority: TaskPriority | Literal["all"] | None = Query(None, description="Фильтр по приоритету"),
    status: TaskStatus | Literal["all"] | None = Query(None, description="Фильтр по статусу"),
    search: str | None = Query(None, description="Поиск по названию и описанию"),
    # Пагинация
    page: int = Query(DEFAULT_PAGE, ge=1, description="Номер страницы"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100, description="Задач на странице"),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """
    Примеры запросов:
    ```
    GET /api/tasks                                  # первые 10 задач
    GET /api/tasks?priority=HIGH                    # только высокий приоритет
    GET /api/tasks?status=COMPLETED&search=report   # завершённые, с "report"
    GET /api/tasks?page=2&limit=20                  # вторая страница по 20
    ```
    """
    result = await service.list_tasks(
        TaskFilters(priority=priority, status=status, search=search),
        page=page,
        limit=limit,
    )
    return _page_response(result)


# ============================================================================
# GET TASK BY ID
# ============================================================================


@router.get(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Получить задачу по ID",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    task = await service.get_task(task_id)
    return TaskEnvelope(task=TaskResponse.model_validate(task))


# ============================================================================
# CREATE TASK
# ============================================================================


@router.post(
    "",
    response_model=TaskMessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    description="""
    Создать задачу и привязать существующие теги пользователя.

    Бизнес-правила:
    - title обязателен (1-255 символов после обрезки пробелов)
    - priority по умолчанию MEDIUM, status - PENDING
    - все tagIds должны быть тегами текущего пользователя
    """,
    responses={400: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def create_task(
    data: TaskCreate,
    service: TaskService = Depends(get_task_service),
) -> TaskMessageEnvelope:
    """
    Пример запроса:
    ```json
    {
        "title": "Prepare report",
        "priority": "HIGH",
        "dueDate": "2026-10-20",
        "tagIds": ["5a1c..."]
    }
    ```
    """
    task = await service.create_task(
        title=data.title,
        description=data.description,
        priority=data.priority,
        status=data.status,
        due_date=data.due_date,
        tag_ids=data.tag_ids,
    )
    return TaskMessageEnvelope(
        message="Task created successfully", task=TaskResponse.model_validate(task)
    )


# ============================================================================
# UPDATE TASK
# ============================================================================


@router.put(
    "/{task_id}",
    response_model=TaskMessageEnvelope,
    summary="Обновить задачу",
    description="Частичное обновление: меняются только переданные поля.",
    responses={
        400: {"model": ErrorResponse, "description": "Ошибка валидации"},
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
    },
)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
) -> TaskMessageEnvelope:
    """
    Пример запроса (отметить выполненной и снять все теги):
    ```json
    {"status": "COMPLETED", "tagIds": []}
    ```
    """
    changes = data.model_dump(exclude_unset=True, exclude={"tag_ids"})
    tag_ids = data.tag_ids if "tag_ids" in data.model_fields_set else None

    task = await service.update_task(task_id, changes, tag_ids=tag_ids)
    return TaskMessageEnvelope(
        message="Task updated successfully", task=TaskResponse.model_validate(task)
    )


# ============================================================================
# DELETE TASK
# ============================================================================


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Удалить задачу",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> MessageResponse:
    await service.delete_task(task_id)
    return MessageResponse(message="Task deleted successfully")
