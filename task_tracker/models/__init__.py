"""SQLAlchemy models for Task Tracker."""

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .federation import FederationAttempt, FederationStatus
from .tag import DEFAULT_TAG_COLOR, Tag
from .task import Task, TaskPriority, TaskStatus
from .task_tag import task_tags
from .user import USER_NAME_MAX_LENGTH, User

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "User",
    "USER_NAME_MAX_LENGTH",
    "Tag",
    "DEFAULT_TAG_COLOR",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "task_tags",
    "FederationAttempt",
    "FederationStatus",
]
