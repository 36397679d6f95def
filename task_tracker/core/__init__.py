"""Core application components."""

from .config import Settings, settings
from .database import AsyncSessionLocal, drop_db, engine, get_db, init_db
from .security import TokenService

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "drop_db",
    "TokenService",
]
