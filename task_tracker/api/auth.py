"""
API endpoints для аутентификации.

- Регистрация и вход по email/паролю (возвращают bearer-токен)
- Профиль текущего пользователя
- Вход через Google (OAuth authorization code flow)

register/login защищены более строгим rate limit, чем остальной API.
"""

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from ..core.config import settings
from ..core.rate_limit import limiter
from ..core.security import TokenService
from ..services import CredentialService, FederationService
from .dependencies import (
    get_credential_service,
    get_current_user_id,
    get_federation_service,
    get_token_service,
)
from .schemas import (
    AuthResponse,
    ErrorResponse,
    ProfileResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


# ============================================================================
# REGISTER
# ============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация",
    responses={
        400: {"model": ErrorResponse, "description": "Email занят или ошибка валидации"},
        429: {"model": ErrorResponse, "description": "Слишком много запросов"},
    },
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    data: UserRegister,
    service: CredentialService = Depends(get_credential_service),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """
    Создать аккаунт и сразу выдать токен.

    Пример запроса:
    ```json
    {"email": "a@x.com", "name": "Alice", "password": "secret1"}
    ```
    """
    user = await service.register(email=data.email, name=data.name, password=data.password)
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=tokens.issue(user.id),
    )


# ============================================================================
# LOGIN
# ============================================================================


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Вход по email и паролю",
    responses={
        401: {"model": ErrorResponse, "description": "Неверный email или пароль"},
        429: {"model": ErrorResponse, "description": "Слишком много запросов"},
    },
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    data: UserLogin,
    service: CredentialService = Depends(get_credential_service),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """
    Проверить пароль и выдать токен.

    Для несуществующего email и неверного пароля ответ одинаковый.
    """
    user = await service.authenticate(email=data.email, password=data.password)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=tokens.issue(user.id),
    )


# ============================================================================
# PROFILE
# ============================================================================


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Профиль текущего пользователя",
    responses={
        401: {"model": ErrorResponse, "description": "Нет токена или токен недействителен"},
        404: {"model": ErrorResponse, "description": "Пользователь удалён"},
    },
)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> ProfileResponse:
    user = await service.get_profile(user_id)
    return ProfileResponse(user=UserResponse.model_validate(user))


# ============================================================================
# GOOGLE OAUTH
# ============================================================================


@router.get(
    "/google",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Войти через Google",
    description="Перенаправляет браузер на страницу согласия Google.",
)
async def google_login(
    service: FederationService = Depends(get_federation_service),
) -> RedirectResponse:
    url = await service.begin()
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get(
    "/google/callback",
    response_model=AuthResponse,
    summary="Callback Google OAuth",
    responses={
        401: {"model": ErrorResponse, "description": "Вход через Google не удался"},
    },
)
async def google_callback(
    state: str | None = Query(None),
    code: str | None = Query(None),
    error: str | None = Query(None),
    service: FederationService = Depends(get_federation_service),
):
    """
    Завершить вход через Google.

    Если задан OAUTH_SUCCESS_REDIRECT - браузер перенаправляется туда
    с токеном в query (?token=...), иначе возвращается JSON как у /login.
    """
    user, token = await service.complete(state=state, code=code, error=error)

    if settings.OAUTH_SUCCESS_REDIRECT:
        return RedirectResponse(
            f"{settings.OAUTH_SUCCESS_REDIRECT}?{urlencode({'token': token})}",
            status_code=status.HTTP_302_FOUND,
        )

    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token,
    )
