"""Task-Tag junction table."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Table

from .base import Base, utc_now

# Many-to-many: удаление задачи или тега удаляет и связи
task_tags = Table(
    "task_tags",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, default=utc_now, nullable=False),
)
