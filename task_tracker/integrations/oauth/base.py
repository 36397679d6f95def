"""Provider-neutral types for the OAuth handshake."""

from dataclasses import dataclass
from typing import Protocol


class ProviderError(Exception):
    """Провайдер отказал или ответил чем-то неожиданным."""


@dataclass(frozen=True)
class ProviderIdentity:
    """
    Личность, подтверждённая провайдером.

    Для связи с локальным аккаунтом используется только email.
    """

    email: str
    name: str
    email_verified: bool = True


class IdentityProvider(Protocol):
    """Что FederationService ждёт от провайдера."""

    name: str

    def authorization_url(self, state: str) -> str:
        """URL, на который отправляем браузер пользователя."""
        ...

    async def fetch_identity(self, code: str) -> ProviderIdentity:
        """Обменять authorization code на подтверждённую личность."""
        ...
