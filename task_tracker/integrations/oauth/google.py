"""Google OAuth 2.0 client (authorization code flow)."""

from urllib.parse import urlencode

import httpx

from ...core.config import settings
from ...core.logging import get_logger
from ...models import USER_NAME_MAX_LENGTH
from .base import ProviderError, ProviderIdentity

logger = get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


def _json_object(response: httpx.Response, what: str) -> dict:
    """Тело ответа как JSON-объект; всё остальное - ProviderError."""
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderError(f"Google {what} returned malformed JSON") from exc
    if not isinstance(payload, dict):
        raise ProviderError(f"Google {what} returned {type(payload).__name__}, expected object")
    return payload


class GoogleOAuthProvider:
    """
    Клиент Google OAuth.

    Шаги:
    1. authorization_url(state) - редирект пользователя в Google
    2. fetch_identity(code) - обмен code на access token и чтение профиля

    transport можно подменить в тестах (httpx.MockTransport).
    """

    name = "google"

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.client_secret = (
            client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET
        )
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI
        self.transport = transport
        self.timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_identity(self, code: str) -> ProviderIdentity:
        """
        Обменять code на профиль пользователя.

        Raises:
            ProviderError: сеть, не-2xx ответ или профиль без email
        """
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                token_response = await client.post(
                    TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_response.raise_for_status()
                access_token = _json_object(token_response, "token endpoint").get("access_token")
                if not access_token:
                    raise ProviderError("Token endpoint returned no access_token")

                userinfo_response = await client.get(
                    USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
                )
                userinfo_response.raise_for_status()
                profile = _json_object(userinfo_response, "userinfo endpoint")
        except httpx.HTTPError as exc:
            logger.warning("Google OAuth request failed", extra={"error": str(exc)})
            raise ProviderError(f"Google request failed: {exc}") from exc

        email = profile.get("email")
        if not email or not isinstance(email, str):
            raise ProviderError("Google profile has no email")

        name = profile.get("name")
        if not isinstance(name, str) or not name.strip():
            name = email.split("@")[0]

        return ProviderIdentity(
            email=email,
            # Отображаемое имя в Google может быть длиннее колонки users.name
            name=name.strip()[:USER_NAME_MAX_LENGTH],
            email_verified=bool(profile.get("email_verified", True)),
        )
