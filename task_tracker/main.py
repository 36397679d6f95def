"""
Главный файл FastAPI приложения.

Точка входа в приложение Task Tracker.

Запуск:
    uvicorn task_tracker.main:app --reload

API документация:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc

Все ресурсные endpoints доступны по пути /api/...
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api import auth_router, tags_router, tasks_router
from .api.errors import register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .core.config import settings
from .core.database import AsyncSessionLocal
from .core.logging import get_logger, setup_logging
from .core.rate_limit import limiter, rate_limit_exceeded_handler

# Инициализируем логирование при импорте модуля
# LOG_LEVEL: DEBUG/INFO/WARNING/ERROR - что логировать
# LOG_FORMAT: json (production) / simple (development)
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

# ============================================================================
# APPLICATION METADATA
# ============================================================================

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup/shutdown events.

    Схема БД создаётся миграциями (alembic upgrade head), не здесь.
    """
    global APP_START_TIME

    APP_START_TIME = time.time()

    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
            "rate_limit_enabled": settings.RATE_LIMIT_ENABLED,
        },
    )

    yield  # Application runs here

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Многопользовательский трекер задач.

    ## Возможности

    * **Аккаунты** - регистрация по email/паролю или вход через Google
    * **Задачи** - приоритет, статус, дедлайн, поиск и пагинация
    * **Теги** - личные цветные метки, назначаются задачам (M:M)

    ## Аутентификация

    Получите токен через `/api/auth/login` и передавайте его в заголовке:
    `Authorization: Bearer <token>`

    ## Архитектура

    ```
    API Layer (FastAPI) → AccessGate → Service Layer → Repository Layer → Database
    ```

    ## Rate Limiting

    - **100 запросов / 15 минут** для обычных endpoints
    - **20 запросов / 15 минут** для register/login
    - При превышении лимита вернётся ошибка 429 Too Many Requests
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Подключаем rate limiter к приложению
app.state.limiter = limiter
# slowapi handler имеет специфичный тип, но работает корректно
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
# Применяет default_limits ко всем endpoints без собственного @limiter.limit
app.add_middleware(SlowAPIMiddleware)


# ============================================================================
# CORS MIDDLEWARE
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Каждый запрос будет залогирован с методом, путём, статусом и временем
app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# INCLUDE ROUTERS
# ============================================================================

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(tasks_router)
api_router.include_router(tags_router)

app.include_router(api_router)

# Регистрируем обработчики ошибок для единого формата
register_error_handlers(app)


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"], summary="Root endpoint", description="Информация о API")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
        "endpoints": {
            "auth": "/api/auth",
            "tasks": "/api/tasks",
            "tags": "/api/tags",
        },
    }


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get(
    "/health", tags=["health"], summary="Health check", description="Проверка работоспособности API"
)
async def health_check():
    """
    Health check endpoint.

    Проверяет подключение к базе данных.

    Пример ответа (200 OK):
    ```json
    {
        "status": "ok",
        "checks": {
            "database": "connected",
            "version": "1.0.0",
            "uptime_seconds": 3600
        },
        "timestamp": "2026-10-17T12:00:00+00:00"
    }
    ```

    Если БД недоступна - 503 и "status": "error".
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    db_status = "disconnected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except (SQLAlchemyError, OSError):
        logger.warning("Health check: database unavailable", exc_info=True)

    overall_status = "ok" if db_status == "connected" else "error"

    return JSONResponse(
        status_code=200 if overall_status == "ok" else 503,
        content={
            "status": overall_status,
            "checks": {
                "database": db_status,
                "version": APP_VERSION,
                "uptime_seconds": uptime_seconds,
            },
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
