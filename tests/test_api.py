"""
Тесты для API Layer (REST endpoints).

Проверяем:
- HTTP статус-коды
- Форматы запросов/ответов (JSON, camelCase)
- Обработку ошибок (400, 401, 404) в едином формате ErrorResponse
- Интеграцию всех слоёв (API → AccessGate → Service → Repository → DB)
"""

from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from task_tracker.api.dependencies import get_identity_provider
from task_tracker.core.config import settings
from task_tracker.core.rate_limit import limiter
from task_tracker.integrations.oauth import ProviderError, ProviderIdentity
from task_tracker.main import app


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# AUTH API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_register(test_client: AsyncClient):
    """Test: POST /api/auth/register - регистрация возвращает пользователя и токен."""
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "Alice@Example.com", "name": "Alice", "password": "secret1"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["token"]
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["name"] == "Alice"
    assert "createdAt" in data["user"]
    assert "password" not in data["user"]
    assert "passwordHash" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(test_client: AsyncClient, register_user):
    """Test: повторный email в другом регистре -> 400 DUPLICATE_EMAIL."""
    await register_user("a@x.com")

    response = await test_client.post(
        "/api/auth/register", json={"email": "A@X.com", "name": "Again", "password": "secret1"}
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "DUPLICATE_EMAIL"
    assert error["message"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_register_validation_error(test_client: AsyncClient):
    """Test: ошибки валидации -> 400 VALIDATION_ERROR с ошибками по полям."""
    response = await test_client.post(
        "/api/auth/register", json={"email": "not-an-email", "name": "A", "password": "123"}
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in error["details"]}
    assert {"email", "name", "password"} <= fields


@pytest.mark.asyncio
async def test_login_success(test_client: AsyncClient, register_user):
    """Test: POST /api/auth/login - вход по email и паролю."""
    registered = await register_user("a@x.com", password="secret1")

    response = await test_client.post(
        "/api/auth/login", json={"email": "a@x.com", "password": "secret1"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["id"] == registered["user"]["id"]
    assert data["token"]


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(test_client: AsyncClient, register_user):
    """Test: неверный пароль и неизвестный email дают одинаковый ответ."""
    await register_user("a@x.com", password="secret1")

    wrong_password = await test_client.post(
        "/api/auth/login", json={"email": "a@x.com", "password": "wrong-password"}
    )
    unknown_email = await test_client.post(
        "/api/auth/login", json={"email": "nobody@x.com", "password": "secret1"}
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["error"]["message"] == "Invalid email or password"
    assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_profile(test_client: AsyncClient, register_user):
    """Test: GET /api/auth/profile - текущий пользователь по токену."""
    registered = await register_user("a@x.com", name="Alice")

    response = await test_client.get("/api/auth/profile", headers=bearer(registered["token"]))

    assert response.status_code == 200
    assert response.json()["user"]["id"] == registered["user"]["id"]
    assert response.json()["user"]["name"] == "Alice"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer not-a-token"},
        {"Authorization": "Basic YTpi"},
    ],
)
async def test_protected_endpoints_require_token(test_client: AsyncClient, headers):
    """Test: без токена или с битым токеном -> 401 UNAUTHORIZED."""
    for path in ["/api/auth/profile", "/api/tasks", "/api/tags"]:
        response = await test_client.get(path, headers=headers)

        assert response.status_code == 401, path
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"] == "Bearer"


# ============================================================================
# TAG API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_tag(test_client: AsyncClient, auth_headers):
    """Test: POST /api/tags - создание тега с цветом по умолчанию."""
    response = await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Tag created successfully"
    assert data["tag"]["name"] == "Work"
    assert data["tag"]["color"] == "#3B82F6"
    assert "userId" in data["tag"]


@pytest.mark.asyncio
async def test_create_tag_duplicate_name(test_client: AsyncClient, auth_headers, register_user):
    """Test: "Work" дважды у одного пользователя - 400, у другого - можно."""
    await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)

    duplicate = await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["code"] == "DUPLICATE_NAME"
    assert duplicate.json()["error"]["message"] == "Tag with this name already exists"

    bob = await register_user("bob@example.com")
    other = await test_client.post("/api/tags", json={"name": "Work"}, headers=bearer(bob["token"]))
    assert other.status_code == 201


@pytest.mark.asyncio
async def test_create_tag_invalid_color(test_client: AsyncClient, auth_headers):
    """Test: цвет не #RRGGBB -> 400 с ошибкой по полю color."""
    response = await test_client.post(
        "/api/tags", json={"name": "Work", "color": "blue"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "color"


@pytest.mark.asyncio
async def test_tag_crud(test_client: AsyncClient, auth_headers):
    """Test: список, получение, обновление и удаление тега."""
    created = await test_client.post(
        "/api/tags", json={"name": "Work", "color": "#3B82F6"}, headers=auth_headers
    )
    tag_id = created.json()["tag"]["id"]
    await test_client.post("/api/tags", json={"name": "Errand"}, headers=auth_headers)

    listed = await test_client.get("/api/tags", headers=auth_headers)
    assert [t["name"] for t in listed.json()["tags"]] == ["Errand", "Work"]

    fetched = await test_client.get(f"/api/tags/{tag_id}", headers=auth_headers)
    assert fetched.json()["tag"]["name"] == "Work"

    updated = await test_client.put(
        f"/api/tags/{tag_id}", json={"color": "#10b981"}, headers=auth_headers
    )
    assert updated.status_code == 200
    assert updated.json()["tag"]["name"] == "Work"
    assert updated.json()["tag"]["color"] == "#10b981"

    deleted = await test_client.delete(f"/api/tags/{tag_id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Tag deleted successfully"

    missing = await test_client.get(f"/api/tags/{tag_id}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Tag not found"


@pytest.mark.asyncio
async def test_rename_tag_collision(test_client: AsyncClient, auth_headers):
    await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)
    personal = await test_client.post("/api/tags", json={"name": "Personal"}, headers=auth_headers)

    response = await test_client.put(
        f"/api/tags/{personal.json()['tag']['id']}", json={"name": "Work"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "DUPLICATE_NAME"


# ============================================================================
# TASK API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_task(test_client: AsyncClient, auth_headers):
    """Test: POST /api/tasks - значения по умолчанию и camelCase в ответе."""
    response = await test_client.post(
        "/api/tasks",
        json={"title": "  Buy milk ", "dueDate": "2026-10-20"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Task created successfully"
    task = data["task"]
    assert task["title"] == "Buy milk"
    assert task["priority"] == "MEDIUM"
    assert task["status"] == "PENDING"
    assert task["dueDate"] == "2026-10-20"
    assert task["description"] is None
    assert task["tags"] == []


@pytest.mark.asyncio
async def test_create_task_accepts_snake_case(test_client: AsyncClient, auth_headers):
    response = await test_client.post(
        "/api/tasks", json={"title": "Report", "due_date": "2026-10-21"}, headers=auth_headers
    )

    assert response.status_code == 201
    assert response.json()["task"]["dueDate"] == "2026-10-21"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"title": ""}, "title"),
        ({"title": "   "}, "title"),
        ({"title": "x" * 256}, "title"),
        ({"title": "Ok", "description": "x" * 1001}, "description"),
        ({"title": "Ok", "priority": "URGENT"}, "priority"),
        ({"title": "Ok", "status": "DONE"}, "status"),
        ({"title": "Ok", "dueDate": "not-a-date"}, "dueDate"),
    ],
)
async def test_create_task_validation(test_client: AsyncClient, auth_headers, payload, field):
    """Test: ошибки формы запроса -> 400 VALIDATION_ERROR по нужному полю."""
    response = await test_client.post("/api/tasks", json=payload, headers=auth_headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert field in {d["field"] for d in error["details"]}


@pytest.mark.asyncio
async def test_create_task_with_foreign_tag_rejected(
    test_client: AsyncClient, auth_headers, register_user
):
    """Test: чужой tagId -> 400, задача не создаётся."""
    bob = await register_user("bob@example.com")
    foreign = await test_client.post(
        "/api/tags", json={"name": "Secret"}, headers=bearer(bob["token"])
    )

    response = await test_client.post(
        "/api/tasks",
        json={"title": "Sneaky", "tagIds": [foreign.json()["tag"]["id"]]},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "tagIds"

    listed = await test_client.get("/api/tasks", headers=auth_headers)
    assert listed.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_update_task_partial(test_client: AsyncClient, auth_headers):
    """Test: PUT со status меняет только статус, теги не трогаются."""
    tag = await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)
    created = await test_client.post(
        "/api/tasks",
        json={
            "title": "Report",
            "description": "Quarterly numbers",
            "priority": "HIGH",
            "dueDate": "2026-10-20",
            "tagIds": [tag.json()["tag"]["id"]],
        },
        headers=auth_headers,
    )
    task_id = created.json()["task"]["id"]

    response = await test_client.put(
        f"/api/tasks/{task_id}", json={"status": "COMPLETED"}, headers=auth_headers
    )

    assert response.status_code == 200
    task = response.json()["task"]
    assert response.json()["message"] == "Task updated successfully"
    assert task["status"] == "COMPLETED"
    assert task["title"] == "Report"
    assert task["description"] == "Quarterly numbers"
    assert task["priority"] == "HIGH"
    assert task["dueDate"] == "2026-10-20"
    assert [t["name"] for t in task["tags"]] == ["Work"]


@pytest.mark.asyncio
async def test_update_task_empty_tag_ids_clears_tags(test_client: AsyncClient, auth_headers):
    """Test: tagIds: [] снимает все теги; null описания очищает его."""
    tag = await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)
    created = await test_client.post(
        "/api/tasks",
        json={"title": "Report", "description": "Draft", "tagIds": [tag.json()["tag"]["id"]]},
        headers=auth_headers,
    )
    task_id = created.json()["task"]["id"]

    response = await test_client.put(
        f"/api/tasks/{task_id}", json={"tagIds": [], "description": None}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["task"]["tags"] == []
    assert response.json()["task"]["description"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "priority", "status"])
async def test_update_task_null_required_field(test_client: AsyncClient, auth_headers, field):
    """Test: {"priority": null} и т.п. -> 400 VALIDATION_ERROR, задача не меняется."""
    created = await test_client.post(
        "/api/tasks", json={"title": "Report", "priority": "HIGH"}, headers=auth_headers
    )
    task_id = created.json()["task"]["id"]

    response = await test_client.put(
        f"/api/tasks/{task_id}", json={field: None}, headers=auth_headers
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert [d["field"] for d in error["details"]] == [field]

    unchanged = await test_client.get(f"/api/tasks/{task_id}", headers=auth_headers)
    task = unchanged.json()["task"]
    assert (task["title"], task["priority"], task["status"]) == ("Report", "HIGH", "PENDING")


@pytest.mark.asyncio
async def test_delete_task(test_client: AsyncClient, auth_headers):
    """Test: DELETE /api/tasks/{id}, после удаления задача не находится, тег остаётся."""
    tag = await test_client.post("/api/tags", json={"name": "Work"}, headers=auth_headers)
    tag_id = tag.json()["tag"]["id"]
    created = await test_client.post(
        "/api/tasks", json={"title": "Report", "tagIds": [tag_id]}, headers=auth_headers
    )
    task_id = created.json()["task"]["id"]

    response = await test_client.delete(f"/api/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Task deleted successfully"

    missing = await test_client.get(f"/api/tasks/{task_id}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Task not found"

    still_there = await test_client.get(f"/api/tags/{tag_id}", headers=auth_headers)
    assert still_there.status_code == 200


@pytest.mark.asyncio
async def test_list_tasks_filter_and_pagination(
    test_client: AsyncClient, auth_headers, register_user
):
    """Test: ?priority=HIGH&page=1&limit=10 - только свои HIGH задачи, total без пагинации."""
    for i in range(12):
        await test_client.post(
            "/api/tasks", json={"title": f"High {i}", "priority": "HIGH"}, headers=auth_headers
        )
    await test_client.post(
        "/api/tasks", json={"title": "Low", "priority": "LOW"}, headers=auth_headers
    )
    bob = await register_user("bob@example.com")
    await test_client.post(
        "/api/tasks", json={"title": "Bob high", "priority": "HIGH"}, headers=bearer(bob["token"])
    )

    response = await test_client.get(
        "/api/tasks", params={"priority": "HIGH", "page": 1, "limit": 10}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["tasks"]) == 10
    assert all(t["priority"] == "HIGH" for t in data["tasks"])
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 12, "pages": 2}

    second = await test_client.get(
        "/api/tasks", params={"priority": "HIGH", "page": 2, "limit": 10}, headers=auth_headers
    )
    assert len(second.json()["tasks"]) == 2

    everything = await test_client.get(
        "/api/tasks", params={"priority": "all", "status": "all"}, headers=auth_headers
    )
    assert everything.json()["pagination"]["total"] == 13
    assert everything.json()["pagination"]["limit"] == 10


@pytest.mark.asyncio
async def test_list_tasks_search(test_client: AsyncClient, auth_headers):
    await test_client.post("/api/tasks", json={"title": "Buy MILK"}, headers=auth_headers)
    await test_client.post(
        "/api/tasks", json={"title": "Call", "description": "ask about milk"}, headers=auth_headers
    )
    await test_client.post("/api/tasks", json={"title": "Gym"}, headers=auth_headers)

    response = await test_client.get("/api/tasks", params={"search": "milk"}, headers=auth_headers)

    assert sorted(t["title"] for t in response.json()["tasks"]) == ["Buy MILK", "Call"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"priority": "URGENT"}, {"status": "DONE"}, {"page": 0}, {"limit": 101}],
)
async def test_list_tasks_invalid_query(test_client: AsyncClient, auth_headers, params):
    response = await test_client.get("/api/tasks", params=params, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# ============================================================================
# EXAMPLE SCENARIO
# ============================================================================


@pytest.mark.asyncio
async def test_scenario_two_users(test_client: AsyncClient):
    """
    Test: полный сценарий.

    A регистрируется и входит, создаёт задачу и тег, вешает тег на задачу
    и видит его в задаче. B регистрируется и не видит задачу A (404).
    """
    register = await test_client.post(
        "/api/auth/register", json={"email": "a@x.com", "name": "User A", "password": "secret1"}
    )
    assert register.status_code == 201

    login = await test_client.post(
        "/api/auth/login", json={"email": "a@x.com", "password": "secret1"}
    )
    assert login.status_code == 200
    headers_a = bearer(login.json()["token"])

    task = await test_client.post(
        "/api/tasks", json={"title": "Buy milk", "priority": "LOW"}, headers=headers_a
    )
    assert task.status_code == 201
    task_id = task.json()["task"]["id"]

    tag = await test_client.post("/api/tags", json={"name": "Errand"}, headers=headers_a)
    assert tag.status_code == 201
    tag_id = tag.json()["tag"]["id"]

    updated = await test_client.put(
        f"/api/tasks/{task_id}", json={"tagIds": [tag_id]}, headers=headers_a
    )
    assert updated.status_code == 200

    fetched = await test_client.get(f"/api/tasks/{task_id}", headers=headers_a)
    assert fetched.status_code == 200
    body = fetched.json()["task"]
    assert body["title"] == "Buy milk"
    assert body["priority"] == "LOW"
    assert [(t["id"], t["name"]) for t in body["tags"]] == [(tag_id, "Errand")]

    register_b = await test_client.post(
        "/api/auth/register", json={"email": "b@x.com", "name": "User B", "password": "secret2"}
    )
    headers_b = bearer(register_b.json()["token"])

    for method in ("get", "delete"):
        response = await getattr(test_client, method)(f"/api/tasks/{task_id}", headers=headers_b)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    stolen = await test_client.put(
        f"/api/tasks/{task_id}", json={"title": "Mine now"}, headers=headers_b
    )
    assert stolen.status_code == 404

    foreign_tag = await test_client.get(f"/api/tags/{tag_id}", headers=headers_b)
    assert foreign_tag.status_code == 404

    unchanged = await test_client.get(f"/api/tasks/{task_id}", headers=headers_a)
    assert unchanged.json()["task"]["title"] == "Buy milk"


# ============================================================================
# GOOGLE OAUTH API TESTS
# ============================================================================


class StubProvider:
    name = "google"

    def __init__(self, identity: ProviderIdentity | None = None, fail: bool = False):
        self.identity = identity
        self.fail = fail

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.google.test/auth?state={state}"

    async def fetch_identity(self, code: str) -> ProviderIdentity:
        if self.fail:
            raise ProviderError("invalid_grant")
        return self.identity


@pytest.fixture
def use_provider():
    """Подменить провайдера Google через dependency_overrides."""

    def _use(provider: StubProvider) -> None:
        app.dependency_overrides[get_identity_provider] = lambda: provider

    return _use


async def _start_google_login(test_client: AsyncClient) -> str:
    response = await test_client.get("/api/auth/google")
    assert response.status_code == 307
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


@pytest.mark.asyncio
async def test_google_login_creates_account(test_client: AsyncClient, use_provider):
    """Test: /google -> redirect со state, /google/callback -> пользователь и токен."""
    use_provider(StubProvider(ProviderIdentity(email="g@gmail.com", name="Gina")))

    state = await _start_google_login(test_client)
    response = await test_client.get(
        "/api/auth/google/callback", params={"state": state, "code": "auth-code"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "g@gmail.com"
    assert data["user"]["name"] == "Gina"

    profile = await test_client.get("/api/auth/profile", headers=bearer(data["token"]))
    assert profile.json()["user"]["id"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_google_login_links_password_account(
    test_client: AsyncClient, use_provider, register_user
):
    """Test: тот же email, что при регистрации по паролю -> тот же аккаунт."""
    registered = await register_user("g@gmail.com", name="Gina")
    use_provider(StubProvider(ProviderIdentity(email="G@Gmail.com", name="Someone")))

    state = await _start_google_login(test_client)
    response = await test_client.get(
        "/api/auth/google/callback", params={"state": state, "code": "auth-code"}
    )

    assert response.json()["user"]["id"] == registered["user"]["id"]

    login = await test_client.post(
        "/api/auth/login", json={"email": "g@gmail.com", "password": "secret1"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_google_callback_failures(test_client: AsyncClient, use_provider):
    """Test: отказ провайдера, чужой state и повтор state -> 401 FEDERATION_FAILED."""
    use_provider(StubProvider(fail=True))
    state = await _start_google_login(test_client)

    failed = await test_client.get(
        "/api/auth/google/callback", params={"state": state, "code": "auth-code"}
    )
    assert failed.status_code == 401
    assert failed.json()["error"]["code"] == "FEDERATION_FAILED"

    replay = await test_client.get(
        "/api/auth/google/callback", params={"state": state, "code": "auth-code"}
    )
    assert replay.status_code == 401

    forged = await test_client.get(
        "/api/auth/google/callback", params={"state": "forged", "code": "auth-code"}
    )
    assert forged.status_code == 401


@pytest.mark.asyncio
async def test_google_callback_redirects_with_token(
    test_client: AsyncClient, use_provider, monkeypatch
):
    """Test: с OAUTH_SUCCESS_REDIRECT браузер уходит на фронтенд с токеном."""
    monkeypatch.setattr(settings, "OAUTH_SUCCESS_REDIRECT", "http://frontend.test/auth")
    use_provider(StubProvider(ProviderIdentity(email="g@gmail.com", name="Gina")))

    state = await _start_google_login(test_client)
    response = await test_client.get(
        "/api/auth/google/callback", params={"state": state, "code": "auth-code"}
    )

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("http://frontend.test/auth?token=")


# ============================================================================
# SERVICE ENDPOINTS
# ============================================================================


@pytest.mark.asyncio
async def test_root(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["tasks"] == "/api/tasks"


@pytest.mark.asyncio
async def test_health(test_client: AsyncClient):
    """Test: /health проверяет БД и добавляет X-Request-ID."""
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "connected"
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_is_propagated(test_client: AsyncClient):
    """Test: корректный X-Request-ID от клиента возвращается, мусорный заменяется."""
    echoed = await test_client.get("/", headers={"X-Request-ID": "trace-42"})
    assert echoed.headers["X-Request-ID"] == "trace-42"

    replaced = await test_client.get("/", headers={"X-Request-ID": "bad id with spaces"})
    assert replaced.headers["X-Request-ID"] != "bad id with spaces"
    assert len(replaced.headers["X-Request-ID"]) == 36


# ============================================================================
# RATE LIMITING
# ============================================================================


@pytest.fixture
def enabled_limiter(monkeypatch):
    """Включить slowapi лимитер (в тестах он выключен) с чистыми счётчиками."""
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()


@pytest.mark.asyncio
async def test_auth_rate_limit_counts_every_attempt(
    test_client: AsyncClient, register_user, enabled_limiter
):
    """Test: AUTH_RATE_LIMIT считает и успешные входы; сверх лимита -> 429."""
    await register_user("a@x.com", password="secret1")
    allowed = int(settings.AUTH_RATE_LIMIT.split()[0])
    credentials = {"email": "a@x.com", "password": "secret1"}

    for _ in range(allowed):
        response = await test_client.post("/api/auth/login", json=credentials)
        assert response.status_code == 200

    blocked = await test_client.post("/api/auth/login", json=credentials)

    assert blocked.status_code == 429
    assert blocked.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
