"""Credential service: registration, login, profile."""

import asyncio

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    operation,
)
from ..core.logging import get_logger
from ..core.security import dummy_password_hash, hash_password, verify_password
from ..models import User
from ..repositories import UserRepository, normalize_email

logger = get_logger(__name__)


class CredentialService:
    """
    Сервис учётных данных.

    Пароли хранятся только как bcrypt-хеш. Хеширование - CPU-bound,
    поэтому оно уходит в отдельный поток и не блокирует event loop.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    @operation
    async def register(self, email: str, name: str, password: str) -> User:
        """
        Зарегистрировать пользователя по email и паролю.

        Raises:
            DuplicateEmailError: email уже занят (без учёта регистра)
        """
        email = normalize_email(email)

        if await self.user_repo.get_by_email(email):
            raise DuplicateEmailError()

        password_hash = await asyncio.to_thread(hash_password, password)

        try:
            user = await self.user_repo.create(
                User(email=email, name=name.strip(), password_hash=password_hash)
            )
        except IntegrityError as exc:
            # Параллельная регистрация успела раньше - сработал unique(email)
            raise DuplicateEmailError() from exc

        logger.info("User registered", extra={"user_id": user.id})
        return user

    @operation
    async def authenticate(self, email: str, password: str) -> User:
        """
        Проверить email и пароль.

        Для "нет такого email", "аккаунт без пароля" и "неверный пароль"
        ответ одинаковый. Если хеша нет, пароль всё равно сверяется с
        заглушкой, чтобы время ответа не выдавало существование email.

        Raises:
            InvalidCredentialsError
        """
        user = await self.user_repo.get_by_email(email)
        stored_hash = user.password_hash if user and user.password_hash else None

        is_valid = await asyncio.to_thread(
            verify_password, password, stored_hash or dummy_password_hash()
        )

        if stored_hash is None or not is_valid:
            logger.info("Login failed")
            raise InvalidCredentialsError()

        return user

    @operation
    async def get_profile(self, user_id: str) -> User:
        """
        Профиль пользователя.

        Raises:
            NotFoundError: пользователь с таким id не существует
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        return user
