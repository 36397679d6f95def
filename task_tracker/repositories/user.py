"""User repository."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from ..models.base import generate_id, utc_now
from .base import BaseRepository


def normalize_email(email: str) -> str:
    """Email сравнивается без учёта регистра и пробелов по краям."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> User | None:
        """
        SQL эквивалент:
            SELECT * FROM users WHERE email = lower({email});
        """
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def get_or_create_by_email(self, email: str, name: str) -> User:
        """
        Атомарный find-or-create по email.

        Вместо "SELECT, потом INSERT" (между ними может вклиниться
        параллельный запрос) делаем INSERT ... ON CONFLICT DO NOTHING
        и затем читаем строку. Уникальный индекс по email гарантирует,
        что пользователь будет ровно один.

        SQL эквивалент (PostgreSQL / SQLite):
            INSERT INTO users (...) VALUES (...) ON CONFLICT (email) DO NOTHING;
            SELECT * FROM users WHERE email = {email};
        """
        email = normalize_email(email)

        existing = await self.get_by_email(email)
        if existing:
            return existing

        now = utc_now()
        values = {
            "id": generate_id(),
            "email": email,
            "name": name,
            "password_hash": None,
            "created_at": now,
            "updated_at": now,
        }

        dialect = self.db.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            await self.db.execute(self._insert_ignoring_conflict(dialect, values))
        else:
            # Без ON CONFLICT: вставка в savepoint, конфликт откатывает только его
            try:
                async with self.db.begin_nested():
                    self.db.add(User(**values))
            except IntegrityError:
                pass

        user = await self.get_by_email(email)
        if user is None:
            raise RuntimeError(f"User {email!r} vanished right after find-or-create")
        return user

    @staticmethod
    def _insert_ignoring_conflict(dialect: str, values: dict):
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert

        return insert(User).values(**values).on_conflict_do_nothing(index_elements=["email"])
