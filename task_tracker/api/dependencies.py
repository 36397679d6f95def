"""
Dependencies для FastAPI endpoints.

Dependency Injection (DI) - паттерн для автоматического предоставления зависимостей.

Цепочка для защищённых endpoints:

    Authorization: Bearer <token>
        → bearer_scheme (извлекает токен)
        → get_current_user_id (AccessGate проверяет токен)
        → get_task_service / get_tag_service (сервис привязан к user_id)
        → endpoint

user_id берётся ТОЛЬКО из проверенного токена, клиент не может
подставить чужой идентификатор ни в теле, ни в query.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.security import TokenService
from ..integrations.oauth import GoogleOAuthProvider, IdentityProvider
from ..services import AccessGate, CredentialService, FederationService, TagService, TaskService

# ============================================================================
# BEARER AUTHENTICATION
# ============================================================================

# auto_error=False - отсутствие заголовка обрабатываем сами,
# чтобы вернуть ошибку в едином формате
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="JWT токен из /api/auth/login. Заголовок: Authorization: Bearer <token>",
)


def get_token_service() -> TokenService:
    return TokenService()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Dependency для проверки bearer-токена.

    Как работает:
    1. Клиент отправляет Authorization: Bearer <token>
    2. HTTPBearer извлекает токен
    3. AccessGate проверяет подпись и срок действия
    4. Если что-то не так - 401 UNAUTHORIZED

    Пример запроса:
        curl -H "Authorization: Bearer eyJhbGciOi..." http://localhost:8000/api/tasks
    """
    raw_token = credentials.credentials if credentials else None
    return AccessGate(tokens).authorize(raw_token)


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_credential_service(db: AsyncSession = Depends(get_db)) -> CredentialService:
    return CredentialService(db)


async def get_task_service(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TaskService:
    """
    Dependency для TaskService.

    Цепочка зависимостей:
        get_task_service зависит от get_current_user_id и get_db
        → FastAPI сначала проверит токен
        → Затем откроет сессию
        → Вернёт TaskService, привязанный к пользователю
    """
    return TaskService(db, user_id)


async def get_tag_service(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TagService:
    """Dependency для TagService (теги текущего пользователя)."""
    return TagService(db, user_id)


def get_identity_provider() -> IdentityProvider:
    """
    Провайдер для входа через Google.

    В тестах подменяется через app.dependency_overrides.
    """
    return GoogleOAuthProvider(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
    )


async def get_federation_service(
    db: AsyncSession = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    tokens: TokenService = Depends(get_token_service),
) -> FederationService:
    return FederationService(db, provider, tokens)
