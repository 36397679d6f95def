"""Task repository with specific queries."""

from dataclasses import dataclass

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Task, TaskPriority, TaskStatus, task_tags
from .base import OwnedRepository


@dataclass
class TaskQuery:
    """
    Фильтры списка задач. None = фильтр не применяется.

    search ищет подстроку в title ИЛИ description без учёта регистра.
    """

    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    search: str | None = None


class TaskRepository(OwnedRepository[Task]):
    """
    Репозиторий для работы с задачами.

    Включает методы для:
    - Чтения задачи с тегами (eager loading)
    - Фильтрации, поиска и пагинации
    - Полной замены набора тегов
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Task, db)

    async def get_owned_with_tags(self, id: str, user_id: str) -> Task | None:
        """
        Задача пользователя вместе с тегами.

        populate_existing=True перечитывает теги, даже если задача
        уже лежит в identity map сессии (например, после replace_tags).
        """
        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.tags))
            .where(Task.id == id, Task.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _filter_conditions(self, user_id: str, query: TaskQuery) -> list:
        conditions = [Task.user_id == user_id]

        if query.priority is not None:
            conditions.append(Task.priority == query.priority)

        if query.status is not None:
            conditions.append(Task.status == query.status)

        if query.search:
            # autoescape: % и _ в поисковой строке ищутся буквально
            conditions.append(
                or_(
                    Task.title.icontains(query.search, autoescape=True),
                    Task.description.icontains(query.search, autoescape=True),
                )
            )

        return conditions

    async def get_filtered(
        self, user_id: str, query: TaskQuery, skip: int = 0, limit: int = 10
    ) -> list[Task]:
        """
        Задачи пользователя с фильтрами и пагинацией, новые сверху.

        SQL эквивалент:
            SELECT * FROM tasks
            WHERE user_id = {user_id}
              AND priority = {priority}  -- если указан
              AND status = {status}  -- если указан
              AND (title ILIKE '%{search}%' OR description ILIKE '%{search}%')  -- если указан
            ORDER BY created_at DESC
            OFFSET {skip} LIMIT {limit};
        """
        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.tags))
            .where(*self._filter_conditions(user_id, query))
            .order_by(Task.created_at.desc(), Task.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_filtered(self, user_id: str, query: TaskQuery) -> int:
        """Сколько задач подходит под фильтры (без пагинации)."""
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(*self._filter_conditions(user_id, query))
        )
        return result.scalar_one()

    async def replace_tags(self, task_id: str, tag_ids: list[str]) -> None:
        """
        Заменить набор тегов задачи целиком.

        Не diff, а "удалить все + вставить новые" (last write wins).
        Обе команды идут в транзакции запроса: если вставка упадёт,
        rollback вернёт старые связи.

        SQL эквивалент:
            DELETE FROM task_tags WHERE task_id = {task_id};
            INSERT INTO task_tags (task_id, tag_id) VALUES (...), (...);
        """
        await self.db.execute(delete(task_tags).where(task_tags.c.task_id == task_id))

        if tag_ids:
            await self.db.execute(
                insert(task_tags),
                [{"task_id": task_id, "tag_id": tag_id} for tag_id in tag_ids],
            )

    async def delete(self, id: str) -> bool:
        """Удалить задачу вместе со связями task_tags (в одной транзакции)."""
        await self.db.execute(delete(task_tags).where(task_tags.c.task_id == id))
        return await super().delete(id)
