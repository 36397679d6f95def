"""User model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

# Длина users.name; имена от внешних провайдеров обрезаются до неё
USER_NAME_MAX_LENGTH = 100


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Пользователь - владелец задач и тегов.

    email хранится в нижнем регистре и уникален независимо от способа
    регистрации (пароль или Google). password_hash пустой у аккаунтов,
    созданных через Google.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(USER_NAME_MAX_LENGTH), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
