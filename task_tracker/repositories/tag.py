"""Tag repository with specific queries."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, task_tags
from .base import OwnedRepository


class TagRepository(OwnedRepository[Tag]):
    """
    Репозиторий для работы с тегами.

    Теги принадлежат пользователю, поэтому каждый запрос
    фильтруется по user_id.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_for_user(self, user_id: str) -> list[Tag]:
        """
        Все теги пользователя, по имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE user_id = {user_id} ORDER BY name ASC;
        """
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == user_id).order_by(Tag.name.asc())
        )
        return list(result.scalars().all())

    async def get_by_name(self, name: str, user_id: str) -> Tag | None:
        """
        Тег пользователя по точному имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE name = {name} AND user_id = {user_id};
        """
        result = await self.db.execute(select(Tag).where(Tag.name == name, Tag.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_owned_ids(self, tag_ids: list[str], user_id: str) -> set[str]:
        """
        Какие из переданных ID - теги этого пользователя.

        Одним запросом вместо N:
            SELECT id FROM tags WHERE id IN (...) AND user_id = {user_id};
        """
        if not tag_ids:
            return set()

        result = await self.db.execute(
            select(Tag.id).where(Tag.id.in_(tag_ids), Tag.user_id == user_id)
        )
        return set(result.scalars().all())

    async def delete(self, id: str) -> bool:
        """
        Удалить тег вместе со связями task_tags.

        ON DELETE CASCADE в схеме делает то же самое, но явное удаление
        связей не зависит от настроек конкретной СУБД. Обе команды
        выполняются в одной транзакции.
        """
        await self.db.execute(delete(task_tags).where(task_tags.c.tag_id == id))
        return await super().delete(id)
