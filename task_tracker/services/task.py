"""Task service with business logic."""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationFailedError, operation
from ..core.logging import get_logger
from ..models import Task, TaskPriority, TaskStatus
from ..models.base import utc_now
from ..repositories import TagRepository, TaskQuery, TaskRepository

logger = get_logger(__name__)

# Значение фильтра "без фильтра" для priority/status
ALL = "all"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

# Поля, которые можно менять через update_task
UPDATABLE_FIELDS = frozenset({"title", "description", "priority", "status", "due_date"})

# NOT NULL колонки: явный None для них - ошибка клиента, а не очистка поля
REQUIRED_FIELDS = frozenset({"title", "priority", "status"})


def _enum_or_none(enum_cls, value, field_name: str):
    if value is None or value == ALL:
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationFailedError(
            "Validation failed",
            details=[{"field": field_name, "message": f"Unknown {field_name}: {value}"}],
        ) from exc


@dataclass
class TaskFilters:
    """
    Фильтры списка задач.

    priority/status: значение enum или "all" (то же, что None).
    search: подстрока в названии или описании, без учёта регистра.
    """

    priority: TaskPriority | str | None = None
    status: TaskStatus | str | None = None
    search: str | None = None

    def to_query(self) -> TaskQuery:
        return TaskQuery(
            priority=_enum_or_none(TaskPriority, self.priority, "priority"),
            status=_enum_or_none(TaskStatus, self.status, "status"),
            search=self.search.strip() if self.search and self.search.strip() else None,
        )


@dataclass
class TaskPage:
    """Страница задач + total по всем страницам."""

    tasks: list[Task] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class TaskService:
    """
    Сервис для работы с задачами текущего пользователя.

    Задачи связаны с тегами (Many-to-Many). Теги задачи всегда
    возвращаются уже разрешёнными (список Tag), а не строками task_tags.
    """

    def __init__(self, db: AsyncSession, user_id: str):
        self.db = db
        self.user_id = user_id
        self.task_repo = TaskRepository(db)
        self.tag_repo = TagRepository(db)

    @operation
    async def list_tasks(
        self,
        filters: TaskFilters | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TaskPage:
        """
        Задачи с фильтрами и пагинацией (page начинается с 1).

        Пример:
            result = await service.list_tasks(TaskFilters(priority="HIGH"), page=2, limit=10)
            result.total   # сколько всего HIGH задач
            result.pages   # ceil(total / limit)
        """
        page = max(page, 1)
        limit = max(limit, 1)
        query = (filters or TaskFilters()).to_query()

        tasks = await self.task_repo.get_filtered(
            self.user_id, query, skip=(page - 1) * limit, limit=limit
        )
        total = await self.task_repo.count_filtered(self.user_id, query)

        return TaskPage(tasks=tasks, total=total, page=page, limit=limit)

    @operation
    async def get_task(self, task_id: str) -> Task:
        """
        Задача с тегами.

        Raises:
            NotFoundError: задачи нет или она чужая
        """
        task = await self.task_repo.get_owned_with_tags(task_id, self.user_id)
        if not task:
            raise NotFoundError("Task")
        return task

    @operation
    async def create_task(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
        due_date: date | None = None,
        tag_ids: list[str] | None = None,
    ) -> Task:
        """
        Создать задачу и привязать теги.

        Raises:
            ValidationFailedError: среди tag_ids есть чужие или несуществующие теги
        """
        tag_ids = await self._resolve_tag_ids(tag_ids) if tag_ids else []

        task = await self.task_repo.create(
            Task(
                title=title.strip(),
                description=description,
                priority=priority,
                status=status,
                due_date=due_date,
                user_id=self.user_id,
            )
        )

        if tag_ids:
            await self.task_repo.replace_tags(task.id, tag_ids)

        logger.info("Task created", extra={"task_id": task.id, "tag_count": len(tag_ids)})
        return await self.get_task(task.id)

    @operation
    async def update_task(
        self, task_id: str, changes: dict[str, Any], tag_ids: list[str] | None = None
    ) -> Task:
        """
        Частичное обновление задачи.

        Args:
            task_id: ID задачи
            changes: только изменяемые поля, например {"status": TaskStatus.COMPLETED}.
                Отсутствующее поле не меняется; явный None очищает
                description или due_date.
            tag_ids: None - теги не трогаем; список (даже пустой) - заменяем
                весь набор тегов

        Raises:
            NotFoundError: задачи нет или она чужая
            ValidationFailedError: недопустимое поле или чужие теги
        """
        task = await self.task_repo.get_owned(task_id, self.user_id)
        if not task:
            raise NotFoundError("Task")

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailedError(
                "Validation failed",
                details=[{"field": name, "message": "Field cannot be updated"} for name in sorted(unknown)],
            )
        nulls = sorted(name for name in REQUIRED_FIELDS if name in changes and changes[name] is None)
        if nulls:
            raise ValidationFailedError(
                "Validation failed",
                details=[{"field": name, "message": "Field cannot be null"} for name in nulls],
            )
        if "title" in changes:
            if not changes["title"].strip():
                raise ValidationFailedError(
                    "Validation failed",
                    details=[{"field": "title", "message": "Title cannot be empty"}],
                )
            changes = {**changes, "title": changes["title"].strip()}

        if tag_ids is not None:
            tag_ids = await self._resolve_tag_ids(tag_ids)

        if changes:
            await self.task_repo.update(task, **changes)

        if tag_ids is not None:
            await self.task_repo.replace_tags(task.id, tag_ids)
            # Замена тегов - тоже изменение задачи; onupdate сработает только
            # при UPDATE строки tasks
            if not changes:
                await self.task_repo.update(task, updated_at=utc_now())

        logger.info(
            "Task updated",
            extra={"task_id": task.id, "fields": sorted(changes), "tags_replaced": tag_ids is not None},
        )
        return await self.get_task(task.id)

    @operation
    async def delete_task(self, task_id: str) -> None:
        """
        Удалить задачу вместе со связями task_tags.

        Raises:
            NotFoundError: задачи нет или она чужая
        """
        task = await self.task_repo.get_owned(task_id, self.user_id)
        if not task:
            raise NotFoundError("Task")

        await self.task_repo.delete(task.id)
        logger.info("Task deleted", extra={"task_id": task.id})

    async def _resolve_tag_ids(self, tag_ids: list[str]) -> list[str]:
        """
        Проверить, что все теги принадлежат пользователю.

        Дубликаты схлопываются с сохранением порядка. Чужой и
        несуществующий тег неотличимы в ответе.

        Raises:
            ValidationFailedError: хотя бы один тег не принадлежит пользователю
        """
        unique_ids = list(dict.fromkeys(tag_ids))
        owned = await self.tag_repo.get_owned_ids(unique_ids, self.user_id)

        missing = [tag_id for tag_id in unique_ids if tag_id not in owned]
        if missing:
            raise ValidationFailedError(
                "Validation failed",
                details=[{"field": "tagIds", "message": f"Tag {tag_id} not found"} for tag_id in missing],
            )

        return unique_ids
