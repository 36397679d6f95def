"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Репозиторий ничего не коммитит: flush() отправляет изменения в БД
    внутри текущей транзакции, commit/rollback делает get_db() в конце запроса.

    Пример использования:
        repo = BaseRepository[User](User, db_session)
        user = await repo.get_by_id("7c9e6679-...")
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Args:
            model: Класс модели SQLAlchemy (например, Task, Tag)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Создать новую запись в БД.

        Returns:
            Созданный объект с заполненными id и timestamps
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: str) -> ModelType | None:
        """
        Получить объект по ID (без учёта владельца).

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, obj: ModelType, **fields: Any) -> ModelType:
        """
        Обновить переданные поля объекта.

        Пример:
            task = await repo.update(task, status=TaskStatus.COMPLETED)
        """
        for key, value in fields.items():
            setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: str) -> bool:
        """
        Удалить запись по ID.

        Returns:
            True если удалено, False если не найдено
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def count(self) -> int:
        """SELECT COUNT(*) FROM table;"""
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()


class OwnedRepository(BaseRepository[ModelType]):
    """
    Репозиторий для записей с владельцем (user_id).

    Все чтения идут с фильтром по user_id: чужая запись
    неотличима от несуществующей.
    """

    async def get_owned(self, id: str, user_id: str) -> ModelType | None:
        """
        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} AND user_id = {user_id};
        """
        result = await self.db.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

