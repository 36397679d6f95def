"""Tag service with business logic."""

import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import DuplicateNameError, NotFoundError, ValidationFailedError, operation
from ..core.logging import get_logger
from ..models import DEFAULT_TAG_COLOR, Tag
from ..repositories import TagRepository

logger = get_logger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class TagService:
    """
    Сервис для работы с тегами текущего пользователя.

    user_id приходит из AccessGate и задаётся один раз при создании
    сервиса - методы его не принимают.
    """

    def __init__(self, db: AsyncSession, user_id: str):
        self.db = db
        self.user_id = user_id
        self.tag_repo = TagRepository(db)

    @operation
    async def list_tags(self) -> list[Tag]:
        """Все теги пользователя по алфавиту."""
        return await self.tag_repo.get_for_user(self.user_id)

    @operation
    async def get_tag(self, tag_id: str) -> Tag:
        """
        Raises:
            NotFoundError: тега нет или он чужой
        """
        tag = await self.tag_repo.get_owned(tag_id, self.user_id)
        if not tag:
            raise NotFoundError("Tag")
        return tag

    @operation
    async def create_tag(self, name: str, color: str | None = None) -> Tag:
        """
        Создать тег.

        Бизнес-правила:
        1. Имя уникально в пределах пользователя
        2. Цвет - #RRGGBB, по умолчанию #3B82F6

        Raises:
            DuplicateNameError: у пользователя уже есть тег с таким именем
        """
        name = name.strip()
        self._validate_color(color)

        if await self.tag_repo.get_by_name(name, self.user_id):
            raise DuplicateNameError()

        try:
            tag = await self.tag_repo.create(
                Tag(name=name, color=color or DEFAULT_TAG_COLOR, user_id=self.user_id)
            )
        except IntegrityError as exc:
            raise DuplicateNameError() from exc

        logger.info("Tag created", extra={"tag_id": tag.id})
        return tag

    @operation
    async def update_tag(self, tag_id: str, name: str | None = None, color: str | None = None) -> Tag:
        """
        Переименовать тег и/или сменить цвет.

        Переименование в то же самое имя - не конфликт.

        Raises:
            NotFoundError: тега нет или он чужой
            DuplicateNameError: имя занято другим тегом пользователя
        """
        tag = await self.get_tag(tag_id)
        self._validate_color(color)

        updates: dict[str, str] = {}
        if name is not None:
            name = name.strip()
            if name != tag.name:
                existing = await self.tag_repo.get_by_name(name, self.user_id)
                if existing and existing.id != tag.id:
                    raise DuplicateNameError()
            updates["name"] = name
        if color is not None:
            updates["color"] = color

        if not updates:
            return tag

        try:
            return await self.tag_repo.update(tag, **updates)
        except IntegrityError as exc:
            raise DuplicateNameError() from exc

    @operation
    async def delete_tag(self, tag_id: str) -> None:
        """
        Удалить тег. Связи с задачами удаляются вместе с ним.

        Raises:
            NotFoundError: тега нет или он чужой
        """
        tag = await self.get_tag(tag_id)
        await self.tag_repo.delete(tag.id)
        logger.info("Tag deleted", extra={"tag_id": tag.id})

    @staticmethod
    def _validate_color(color: str | None) -> None:
        if color is not None and not COLOR_PATTERN.match(color):
            raise ValidationFailedError(
                "Validation failed",
                details=[{"field": "color", "message": "Color must be a valid hex color"}],
            )
