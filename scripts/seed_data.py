#!/usr/bin/env python3
"""
Seed script: тестовый пользователь, теги и задачи через API.

Повторный запуск не создаёт дубликатов пользователя и тегов:
если email уже занят - входим, если тег уже есть - берём существующий.

Запуск (сервер должен быть поднят):
    python scripts/seed_data.py
"""

import requests

API_URL = "http://localhost:8000/api"

USER = {"email": "test@example.com", "name": "Test User", "password": "password123"}

TAGS = [
    {"name": "Work", "color": "#3B82F6"},
    {"name": "Personal", "color": "#10B981"},
    {"name": "Urgent", "color": "#EF4444"},
]

TASKS = [
    {
        "title": "Complete project proposal",
        "description": "Finish the client project proposal document with all requirements",
        "priority": "HIGH",
        "status": "IN_PROGRESS",
        "dueDate": "2024-02-15",
        "tags": ["Work", "Urgent"],
    },
    {
        "title": "Review code changes",
        "description": "Review pull requests for the main branch and provide feedback",
        "priority": "MEDIUM",
        "status": "PENDING",
        "dueDate": "2024-02-20",
        "tags": ["Work"],
    },
    {
        "title": "Update documentation",
        "description": "Update API documentation with new endpoints and examples",
        "priority": "LOW",
        "status": "COMPLETED",
        "dueDate": "2024-02-08",
        "tags": ["Personal"],
    },
    {
        "title": "Plan team meeting",
        "description": "Schedule and prepare agenda for weekly team meeting",
        "priority": "MEDIUM",
        "status": "PENDING",
        "dueDate": "2024-02-12",
        "tags": ["Work"],
    },
]


def get_token():
    """Зарегистрировать тестового пользователя или войти, если он уже есть."""
    response = requests.post(f"{API_URL}/auth/register", json=USER)
    if response.status_code == 201:
        print(f"  ✅ User created: {USER['email']}")
        return response.json()["token"]

    response = requests.post(
        f"{API_URL}/auth/login",
        json={"email": USER["email"], "password": USER["password"]},
    )
    response.raise_for_status()
    print(f"  ✅ User exists: {USER['email']}")
    return response.json()["token"]


def ensure_tags(headers):
    """Создать недостающие теги. Возвращает {name: id}."""
    response = requests.get(f"{API_URL}/tags", headers=headers)
    response.raise_for_status()
    tag_ids = {tag["name"]: tag["id"] for tag in response.json()["tags"]}

    for tag_data in TAGS:
        if tag_data["name"] in tag_ids:
            continue
        response = requests.post(f"{API_URL}/tags", headers=headers, json=tag_data)
        if response.status_code == 201:
            tag = response.json()["tag"]
            tag_ids[tag["name"]] = tag["id"]
        else:
            print(f"Error creating tag {tag_data['name']}: {response.text}")

    print(f"  ✅ Tags: {', '.join(sorted(tag_ids))}")
    return tag_ids


def create_task(task_data, tag_ids, headers):
    """Create a task via API."""
    payload = {key: value for key, value in task_data.items() if key != "tags"}
    payload["tagIds"] = [tag_ids[name] for name in task_data["tags"] if name in tag_ids]

    response = requests.post(f"{API_URL}/tasks", headers=headers, json=payload)
    if response.status_code == 201:
        return response.json()["task"]
    else:
        print(f"Error creating task {task_data['title']}: {response.text}")
        return None


def main():
    print("=" * 60)
    print("Seeding database")
    print("=" * 60)

    print("\n👤 User...")
    headers = {"Authorization": f"Bearer {get_token()}"}

    print("\n🏷️  Tags...")
    tag_ids = ensure_tags(headers)

    print("\n📋 Creating tasks...")
    total_tasks = 0
    for task_data in TASKS:
        if create_task(task_data, tag_ids, headers):
            total_tasks += 1
            print(f"    ✅ {task_data['title']} ({task_data['priority']})")

    print("\n" + "=" * 60)
    print(f"✅ Done! Created {total_tasks} tasks")
    print(f"📋 Test credentials: {USER['email']} / {USER['password']}")
    print("=" * 60)


if __name__ == "__main__":
    main()
