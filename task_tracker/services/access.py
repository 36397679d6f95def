"""Access gate: bearer token -> trusted user id."""

from ..core.exceptions import InvalidTokenError, UnauthorizedError
from ..core.logging import current_user_id_var
from ..core.security import TokenService


class AccessGate:
    """
    Единственное место, где bearer-токен превращается в user_id.

    Сервисы задач и тегов получают user_id только отсюда -
    клиент не может подставить чужой идентификатор.
    """

    def __init__(self, tokens: TokenService | None = None):
        self.tokens = tokens or TokenService()

    def authorize(self, raw_token: str | None) -> str:
        """
        Проверить токен и привязать пользователя к контексту запроса.

        Raises:
            UnauthorizedError: токена нет, он битый или истёк
        """
        if not raw_token:
            raise UnauthorizedError("Access token required")

        try:
            user_id = self.tokens.verify(raw_token)
        except InvalidTokenError as exc:
            raise UnauthorizedError("Invalid or expired token") from exc

        current_user_id_var.set(user_id)
        return user_id
