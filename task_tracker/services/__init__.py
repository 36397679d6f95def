"""Service layer with business logic."""

from .access import AccessGate
from .auth import CredentialService
from .federation import FederationService
from .tag import TagService
from .task import ALL, TaskFilters, TaskPage, TaskService

__all__ = [
    "AccessGate",
    "CredentialService",
    "FederationService",
    "TagService",
    "TaskService",
    "TaskFilters",
    "TaskPage",
    "ALL",
]
