"""Tag model."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

DEFAULT_TAG_COLOR = "#3B82F6"


class Tag(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Тег пользователя.

    Имя уникально в пределах одного пользователя: у двух разных
    пользователей может быть тег "Work", у одного - только один.
    """

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("name", "user_id", name="uq_tags_name_user_id"),)

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_TAG_COLOR, nullable=False)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
