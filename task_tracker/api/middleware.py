"""HTTP middleware: request id, access log, per-request log context."""

import logging
import re
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import current_user_id_var, generate_request_id, get_logger, request_id_var

logger = get_logger("api.requests")

# Служебные endpoints не пишем в access log
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# Request ID от клиента/прокси принимаем только в безопасном виде
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _request_id_for(request: Request) -> str:
    """Взять X-Request-ID из запроса (если он корректный) или сгенерировать новый."""
    incoming = request.headers.get("X-Request-ID", "")
    return incoming if REQUEST_ID_PATTERN.match(incoming) else generate_request_id()


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Для каждого запроса:
    - выставляет request_id (из заголовка X-Request-ID или новый)
      и сбрасывает user_id: его заполнит AccessGate после проверки токена
    - пишет одну строку access log: метод, путь, статус, время (мс)
    - возвращает X-Request-ID в ответе

    4xx пишутся как WARNING (в т.ч. 401 и 429), 5xx как ERROR.

    Пример лога (JSON):
    {
        "timestamp": "2026-10-17T12:00:00+00:00",
        "level": "WARNING",
        "logger": "api.requests",
        "message": "Request completed",
        "request_id": "abc-123",
        "extra": {"method": "GET", "path": "/api/tasks/42", "status": 404, "duration_ms": 3}
    }
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _request_id_for(request)
        request_id_var.set(request_id)
        current_user_id_var.set("")

        started = time.perf_counter()
        fields = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = int((time.perf_counter() - started) * 1000)
            logger.error("Request failed", extra=fields, exc_info=True)
            raise

        fields["status"] = response.status_code
        fields["duration_ms"] = int((time.perf_counter() - started) * 1000)
        response.headers["X-Request-ID"] = request_id

        if request.url.path not in QUIET_PATHS:
            logger.log(_level_for(response.status_code), "Request completed", extra=fields)

        return response
