"""Repository layer for data access."""

from .base import BaseRepository, OwnedRepository
from .federation import FederationAttemptRepository
from .tag import TagRepository
from .task import TaskQuery, TaskRepository
from .user import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "UserRepository",
    "normalize_email",
    "TagRepository",
    "TaskRepository",
    "TaskQuery",
    "FederationAttemptRepository",
]
