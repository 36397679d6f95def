"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- test_client: HTTP клиент для тестирования API endpoints
- register_user / auth_headers: регистрация через API и заголовок Authorization
"""

import os

# Настройки читаются при импорте task_tracker, поэтому задаём их до импорта
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "simple"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from task_tracker.api.dependencies import get_db  # noqa: E402
from task_tracker.core.database import enable_sqlite_foreign_keys  # noqa: E402
from task_tracker.main import app  # noqa: E402
from task_tracker.models import Base, User  # noqa: E402
from task_tracker.repositories import UserRepository  # noqa: E402

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    StaticPool обеспечивает что используется одно и то же соединение,
    что критично для in-memory БД (иначе данные теряются).

    PRAGMA foreign_keys=ON включается как в приложении: каскадное
    удаление task_tags проверяется на уровне схемы.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """
    Предоставляет async session для работы с тестовой БД.

    Каждый тест получает чистую БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user(test_db) -> User:
    """Владелец задач и тегов для тестов сервисов и репозиториев."""
    repo = UserRepository(test_db)
    created = await repo.create(User(email="owner@example.com", name="Owner", password_hash=None))
    await test_db.commit()
    return created


@pytest_asyncio.fixture
async def other_user(test_db) -> User:
    """Второй пользователь: проверка изоляции данных."""
    repo = UserRepository(test_db)
    created = await repo.create(User(email="other@example.com", name="Other", password_hash=None))
    await test_db.commit()
    return created


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    Предоставляет HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def register_user(test_client):
    """
    Зарегистрировать пользователя через API.

    Использование:
        data = await register_user("a@x.com")
        data["token"], data["user"]["id"]
    """

    async def _register(email: str, name: str = "Test User", password: str = "secret1") -> dict:
        response = await test_client.post(
            "/api/auth/register", json={"email": email, "name": name, "password": password}
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest_asyncio.fixture
async def auth_headers(register_user) -> dict[str, str]:
    """Authorization заголовок для пользователя alice@example.com."""
    data = await register_user("alice@example.com", name="Alice")
    return {"Authorization": f"Bearer {data['token']}"}


# Pytest configuration
@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
