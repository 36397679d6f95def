"""Identity federation: login through a third-party provider."""

import secrets
from datetime import timedelta
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import FederationFailedError, operation
from ..core.logging import get_logger
from ..core.security import TokenService
from ..integrations.oauth import IdentityProvider, ProviderError, ProviderIdentity
from ..models import FederationAttempt, FederationStatus, User
from ..models.base import utc_now
from ..repositories import FederationAttemptRepository, UserRepository

logger = get_logger(__name__)


class FederationService:
    """
    Вход через внешнего провайдера (Google).

    Каждая попытка - короткоживущий конечный автомат:

        REDIRECTED -> PROVIDER_CALLBACK -> RESOLVED
                                        -> FAILED

    Между редиректом и callback хранится только state
    (FederationAttempt), никаких серверных сессий.

    Локальный аккаунт ищется ТОЛЬКО по email: если пользователь уже
    регистрировался с паролем, вход через Google попадёт в тот же аккаунт.
    """

    def __init__(
        self,
        db: AsyncSession,
        provider: IdentityProvider,
        tokens: TokenService | None = None,
    ):
        self.db = db
        self.provider = provider
        self.tokens = tokens or TokenService()
        self.user_repo = UserRepository(db)
        self.attempt_repo = FederationAttemptRepository(db)

    @operation
    async def begin(self) -> str:
        """
        Начать попытку входа.

        Returns:
            URL провайдера для редиректа браузера
        """
        attempt = await self.attempt_repo.create(
            FederationAttempt(
                state=secrets.token_urlsafe(32),
                provider=self.provider.name,
                status=FederationStatus.REDIRECTED,
                expires_at=utc_now() + timedelta(seconds=settings.OAUTH_STATE_TTL_SECONDS),
            )
        )
        return self.provider.authorization_url(attempt.state)

    @operation
    async def complete(
        self, state: str | None, code: str | None = None, error: str | None = None
    ) -> tuple[User, str]:
        """
        Обработать callback провайдера.

        Returns:
            (пользователь, bearer-токен)

        Raises:
            FederationFailedError: неизвестный/просроченный/использованный state,
                отказ провайдера или профиль без подтверждённого email.
                Пользователи при этом не создаются и не меняются.
        """
        attempt = await self.attempt_repo.get_by_state(state) if state else None
        if attempt is None or attempt.provider != self.provider.name:
            raise FederationFailedError("Unknown login attempt")

        if attempt.status != FederationStatus.REDIRECTED:
            raise FederationFailedError("Login attempt already used")

        if attempt.expires_at < utc_now():
            await self._fail(attempt, "state expired")

        claimed = await self.attempt_repo.transition(
            attempt, FederationStatus.REDIRECTED, FederationStatus.PROVIDER_CALLBACK
        )
        if not claimed:
            # Параллельный callback с тем же state успел раньше
            raise FederationFailedError("Login attempt already used")

        if error or not code:
            await self._fail(attempt, f"provider error: {error or 'missing code'}")

        try:
            identity = await self.provider.fetch_identity(code)
        except ProviderError as exc:
            await self._fail(attempt, str(exc))

        if not identity.email_verified:
            await self._fail(attempt, "email not verified by provider")

        user = await self.resolve_identity(identity)
        await self.attempt_repo.update(
            attempt, status=FederationStatus.RESOLVED, user_id=user.id
        )

        logger.info(
            "Federated login resolved",
            extra={"provider": self.provider.name, "user_id": user.id},
        )
        return user, self.tokens.issue(user.id)

    @operation
    async def resolve_identity(self, identity: ProviderIdentity) -> User:
        """
        Найти или создать локального пользователя по email провайдера.

        Атомарно: два одновременных callback для нового email
        создадут ровно одного пользователя.
        """
        return await self.user_repo.get_or_create_by_email(identity.email, identity.name)

    async def _fail(self, attempt: FederationAttempt, reason: str) -> NoReturn:
        """
        Перевести попытку в FAILED и выбросить FederationFailedError.

        FAILED коммитится сразу: иначе rollback запроса вернул бы
        попытку в REDIRECTED и state можно было бы использовать повторно.
        """
        await self.attempt_repo.update(
            attempt, status=FederationStatus.FAILED, failure_reason=reason[:500]
        )
        await self.db.commit()

        logger.warning(
            "Federated login failed",
            extra={"provider": self.provider.name, "reason": reason},
        )
        raise FederationFailedError()
