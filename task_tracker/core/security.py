"""
Пароли и токены.

- bcrypt для хранения паролей (стоимость фиксируется в хеше при создании)
- JWT (python-jose) для stateless-аутентификации: в токене только sub и exp
"""

import base64
import hashlib
from datetime import UTC, datetime, timedelta
from functools import lru_cache

import bcrypt
from jose import JWTError, jwt

from .config import settings
from .exceptions import InvalidTokenError


def _prehash(password: str) -> bytes:
    """
    SHA-256 + base64 перед bcrypt.

    bcrypt смотрит только на первые 72 байта; base64 от дайджеста
    занимает 44 байта и не содержит NUL.
    """
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str, rounds: int | None = None) -> str:
    """Посчитать bcrypt-хеш пароля. CPU-bound: вызывать через asyncio.to_thread."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Сравнить пароль с хешем (bcrypt.checkpw сравнивает за постоянное время)."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Повреждённый хеш в БД
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """
    Хеш-заглушка для пользователей без пароля.

    Проверка против него занимает столько же времени, сколько настоящая,
    поэтому по времени ответа нельзя понять, существует ли email.
    """
    return hash_password("not-a-real-password")


class TokenService:
    """
    Выпуск и проверка bearer-токенов.

    Пример:
        tokens = TokenService()
        token = tokens.issue(user.id)
        user_id = tokens.verify(token)  # == user.id
    """

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expires_minutes: int | None = None,
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expires_minutes = (
            expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    def issue(self, user_id: str) -> str:
        """Подписанный токен, привязанный только к user_id."""
        expire = datetime.now(UTC) + timedelta(minutes=self.expires_minutes)
        payload = {"sub": user_id, "exp": expire}
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Проверить подпись и срок действия.

        Returns:
            user_id из claim "sub"

        Raises:
            InvalidTokenError: токен битый, чужой подписи или истёк
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidTokenError() from exc

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidTokenError()
        return user_id
